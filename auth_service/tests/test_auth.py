"""
Test cases for login, self, refresh, logout and the user listing.
"""
import pytest

from auth_service.auth.hashing import PasswordHasher
from auth_service.auth.middleware import get_token_issuer
from auth_service.auth.models import Roles, User
from conftest import fetch_refresh_tokens, get_cookie


def cookie_header(access_token=None, refresh_token=None):
    parts = []
    if access_token:
        parts.append(f"accessToken={access_token}")
    if refresh_token:
        parts.append(f"refreshToken={refresh_token}")
    return {"Cookie": "; ".join(parts)}


async def register(client, user_data):
    response = await client.post("/auth/register", json=user_data)
    assert response.status_code == 201
    client.cookies.clear()
    return (
        response.json()["id"],
        get_cookie(response, "accessToken"),
        get_cookie(response, "refreshToken"),
    )


@pytest.mark.asyncio
async def test_root_and_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Welcome to auth service"

    response = await client.get("/health")
    assert response.json() == {"status": "ok"}


# --- Login ---

@pytest.mark.asyncio
async def test_login_with_valid_credentials(client, session_factory, user_data):
    user_id, _, _ = await register(client, user_data)

    response = await client.post("/auth/login", json={
        "email": user_data["email"],
        "password": user_data["password"],
    })

    assert response.status_code == 200
    assert response.json() == {"id": user_id}
    access = get_token_issuer().verify_access(get_cookie(response, "accessToken"))
    assert access.user_id == user_id
    # One record from registration, one from login
    assert len(await fetch_refresh_tokens(session_factory, user_id=user_id)) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [
    ("shivapal108941@gmail.com", "wrong-password"),
    ("nobody@example.com", "secret@1234"),
])
async def test_login_with_bad_credentials(client, user_data, email, password):
    await register(client, user_data)

    response = await client.post("/auth/login", json={"email": email, "password": password})

    assert response.status_code == 400
    assert response.json()["errors"] == [{
        "type": "ValidationError",
        "msg": "Email or password does not match.",
        "path": "",
        "location": "",
    }]
    assert get_cookie(response, "accessToken") is None


@pytest.mark.asyncio
async def test_login_ignores_email_case(client, user_data):
    user_id, _, _ = await register(client, user_data)

    response = await client.post("/auth/login", json={
        "email": " ShivaPal108941@Gmail.com",
        "password": user_data["password"],
    })

    assert response.status_code == 200
    assert response.json() == {"id": user_id}

@pytest.mark.asyncio
async def test_login_validates_fields(client):
    response = await client.post("/auth/login", json={"email": "", "password": ""})

    assert response.status_code == 400
    paths = [error["path"] for error in response.json()["errors"]]
    assert paths == ["email", "password"]


# --- Self ---

@pytest.mark.asyncio
async def test_self_with_access_cookie(client, user_data):
    user_id, access_token, _ = await register(client, user_data)

    response = await client.get("/auth/self", headers=cookie_header(access_token))

    assert response.status_code == 200
    assert response.json() == {
        "id": user_id,
        "firstName": "Shiva",
        "lastName": "Pal",
        "email": "shivapal108941@gmail.com",
        "role": "customer",
    }


@pytest.mark.asyncio
async def test_self_with_bearer_header(client, user_data):
    user_id, access_token, _ = await register(client, user_data)

    response = await client.get(
        "/auth/self", headers={"Authorization": f"Bearer {access_token}"}
    )

    assert response.status_code == 200
    assert response.json()["id"] == user_id
    assert "password" not in response.json()


@pytest.mark.asyncio
async def test_self_requires_valid_token(client, user_data):
    _, _, refresh_token = await register(client, user_data)

    response = await client.get("/auth/self")
    assert response.status_code == 401
    assert response.json()["errors"][0]["type"] == "AuthenticationError"

    response = await client.get(
        "/auth/self", headers={"Authorization": "Bearer invalid.token.here"}
    )
    assert response.status_code == 401

    # A refresh token is not accepted as an access token
    response = await client.get("/auth/self", headers=cookie_header(refresh_token))
    assert response.status_code == 401


# --- Refresh ---

@pytest.mark.asyncio
async def test_refresh_rotates_token(client, session_factory, user_data):
    user_id, _, refresh_token = await register(client, user_data)
    old_id = get_token_issuer().verify_refresh(refresh_token).token_id

    response = await client.post(
        "/auth/refresh", headers=cookie_header(refresh_token=refresh_token)
    )

    assert response.status_code == 200
    assert response.json() == {"id": user_id}
    new_refresh = get_token_issuer().verify_refresh(get_cookie(response, "refreshToken"))
    tokens = await fetch_refresh_tokens(session_factory, user_id=user_id)
    assert [token.id for token in tokens] == [new_refresh.token_id]
    assert new_refresh.token_id != old_id


@pytest.mark.asyncio
async def test_refresh_rejects_revoked_token(client, user_data):
    _, _, refresh_token = await register(client, user_data)
    first = await client.post(
        "/auth/refresh", headers=cookie_header(refresh_token=refresh_token)
    )
    assert first.status_code == 200
    client.cookies.clear()

    second = await client.post(
        "/auth/refresh", headers=cookie_header(refresh_token=refresh_token)
    )

    assert second.status_code == 401
    assert second.json()["errors"][0]["msg"] == "Refresh token has been revoked"


@pytest.mark.asyncio
async def test_refresh_requires_cookie(client):
    response = await client.post("/auth/refresh")

    assert response.status_code == 401


# --- Logout ---

@pytest.mark.asyncio
async def test_logout_deletes_refresh_token(client, session_factory, user_data):
    user_id, access_token, refresh_token = await register(client, user_data)

    response = await client.post(
        "/auth/logout", headers=cookie_header(access_token, refresh_token)
    )

    assert response.status_code == 200
    assert await fetch_refresh_tokens(session_factory, user_id=user_id) == []
    cleared = response.headers.get_list("set-cookie")
    assert any(cookie.startswith("accessToken=") and "Max-Age=0" in cookie for cookie in cleared)
    assert any(cookie.startswith("refreshToken=") and "Max-Age=0" in cookie for cookie in cleared)


@pytest.mark.asyncio
async def test_logout_requires_access_token(client, user_data):
    _, _, refresh_token = await register(client, user_data)

    response = await client.post(
        "/auth/logout", headers=cookie_header(refresh_token=refresh_token)
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_rejects_refresh_token_of_another_user(client, session_factory, user_data):
    _, access_token, _ = await register(client, user_data)
    other_id, _, other_refresh = await register(client, dict(user_data, email="other@example.com"))

    response = await client.post(
        "/auth/logout", headers=cookie_header(access_token, other_refresh)
    )

    assert response.status_code == 401
    assert response.json()["errors"][0]["type"] == "AuthenticationError"
    assert len(await fetch_refresh_tokens(session_factory, user_id=other_id)) == 1

# --- User listing ---

@pytest.mark.asyncio
async def test_list_users_forbidden_for_customer(client, user_data):
    _, access_token, _ = await register(client, user_data)

    response = await client.get("/users", headers=cookie_header(access_token))

    assert response.status_code == 403
    assert response.json()["errors"][0]["type"] == "PermissionDeniedError"


@pytest.mark.asyncio
async def test_list_users_as_admin(client, session_factory, user_data):
    async with session_factory() as session:
        session.add(User(
            first_name="Ada",
            last_name="Admin",
            email="admin@example.com",
            password=PasswordHasher(rounds=4).hash("admin-password"),
            role=Roles.ADMIN.value,
        ))
        await session.commit()
    await register(client, user_data)

    login = await client.post("/auth/login", json={
        "email": "admin@example.com",
        "password": "admin-password",
    })
    access_token = get_cookie(login, "accessToken")
    client.cookies.clear()

    response = await client.get("/users", headers=cookie_header(access_token))

    assert response.status_code == 200
    emails = [user["email"] for user in response.json()]
    assert emails == ["admin@example.com", "shivapal108941@gmail.com"]
    assert all("password" not in user for user in response.json())
