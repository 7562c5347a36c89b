"""
Authentication dependencies.

This module provides FastAPI dependencies for:
- Resolving the current user from the access token
- Reading the refresh token
- Role-based access control
- Building the auth controller for a request
"""
from typing import List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.auth.controller import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, AuthController
from auth_service.auth.hashing import PasswordHasher
from auth_service.auth.jwt import TokenData, TokenIssuer
from auth_service.auth.models import Roles
from auth_service.auth.repositories import RefreshTokenRepository, UserRepository
from auth_service.auth.users import UserService
from auth_service.base_microservice import BaseMicroservice, config, get_db_session
from auth_service.errors import AuthenticationError, PermissionDeniedError

# Bearer header is accepted next to the accessToken cookie
bearer_scheme = HTTPBearer(auto_error=False)

_token_issuer = TokenIssuer(config)
_password_hasher = PasswordHasher(rounds=config.bcrypt_rounds)
_service = BaseMicroservice()


def get_token_issuer() -> TokenIssuer:
    return _token_issuer


def get_password_hasher() -> PasswordHasher:
    return _password_hasher


def get_user_service(
    db: AsyncSession = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(UserRepository(db), hasher)


def get_auth_controller(
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthController:
    return AuthController(
        user_service=user_service,
        token_issuer=token_issuer,
        refresh_tokens=RefreshTokenRepository(db),
        config=config,
        service=_service,
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenData:
    """
    FastAPI dependency to get the current authenticated user from the access token.

    The ``accessToken`` cookie wins over an ``Authorization: Bearer`` header.

    Raises:
        AuthenticationError: If no token is present or it is invalid or expired
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise AuthenticationError("Authentication required")

    token_data = token_issuer.verify_access(token)
    if token_data is None:
        raise AuthenticationError("Could not validate credentials")
    return token_data


async def get_refresh_token(
    request: Request,
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenData:
    """FastAPI dependency returning the data of the ``refreshToken`` cookie."""
    token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not token:
        raise AuthenticationError("Refresh token required")

    token_data = token_issuer.verify_refresh(token)
    if token_data is None:
        raise AuthenticationError("Invalid or expired refresh token")
    return token_data


class RBACMiddleware:
    """
    Role-Based Access Control.

    Creates FastAPI dependencies for protecting routes based on the role
    stored on the user, so a role change takes effect before old tokens expire.
    """

    @staticmethod
    def has_roles(roles: List[Roles]):
        """
        Dependency to check if the user has any of the specified roles.

        Args:
            roles: Allowed roles (any match is sufficient)

        Returns:
            Dependency function
        """
        allowed = {role.value for role in roles}

        async def verify_roles(
            token_data: TokenData = Depends(get_current_user),
            user_service: UserService = Depends(get_user_service),
        ) -> TokenData:
            user = await user_service.find_by_id(token_data.user_id)
            if user is None:
                raise AuthenticationError("User not found")

            if user.role not in allowed:
                raise PermissionDeniedError("You don't have enough permissions")

            return token_data

        return verify_roles
