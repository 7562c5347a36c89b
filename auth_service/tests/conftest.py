import os
import tempfile

# Settings must be in place before auth_service.base_microservice is imported
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="auth-service-logs-")
os.environ["BCRYPT_ROUNDS"] = "4"

import base64
import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth_service.auth.models import RefreshToken, User
from auth_service.base_microservice import Base, get_db_session
from auth_service.main import app


@pytest_asyncio.fixture
async def db_engine():
    """A fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(base_url="http://test", transport=transport) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def user_data():
    return {
        "firstName": "Shiva",
        "lastName": "Pal",
        "email": "shivapal108941@gmail.com",
        "password": "secret@1234",
    }


async def fetch_users(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())


async def fetch_refresh_tokens(session_factory, user_id=None):
    async with session_factory() as session:
        stmt = select(RefreshToken).order_by(RefreshToken.id)
        if user_id is not None:
            stmt = stmt.where(RefreshToken.user_id == user_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())


def get_cookie(response, name):
    """Return the value of a Set-Cookie header by cookie name, or None."""
    for cookie in response.headers.get_list("set-cookie"):
        if cookie.startswith(f"{name}="):
            return cookie.split(";")[0].split("=", 1)[1]
    return None


def is_jwt(token):
    if not token:
        return False
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        return False
    try:
        for part in parts[:2]:
            padded = part + "=" * (-len(part) % 4)
            json.loads(base64.urlsafe_b64decode(padded))
    except ValueError:
        return False
    return True
