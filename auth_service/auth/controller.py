"""
Auth controller.

Orchestrates the auth workflows on top of the user service, the token issuer
and the refresh token store:
- register: duplicate check, hashing, customer creation, token issuance
- login, self, refresh (rotation) and logout
"""
from typing import Any, Dict

from fastapi import Response, status
from fastapi.responses import JSONResponse

from auth_service.auth.jwt import TokenData, TokenIssuer
from auth_service.auth.models import User
from auth_service.auth.repositories import RefreshTokenRepository
from auth_service.auth.users import UserService
from auth_service.auth.validators import LoginRequest, RegisterRequest, UserOut
from auth_service.base_microservice import BaseMicroservice
from auth_service.config import Config
from auth_service.errors import (
    AuthenticationError,
    ConflictError,
    ValidationError,
    error_envelope,
    error_item,
)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


class AuthController:
    def __init__(
        self,
        user_service: UserService,
        token_issuer: TokenIssuer,
        refresh_tokens: RefreshTokenRepository,
        config: Config,
        service: BaseMicroservice,
    ):
        self.user_service = user_service
        self.token_issuer = token_issuer
        self.refresh_tokens = refresh_tokens
        self.config = config
        self.service = service

    async def register(self, data: RegisterRequest, response: Response):
        """
        Register a customer and sign them in.

        Returns the new user's id with status 201, or a 400 error envelope when
        the email is already registered.
        """
        try:
            user = await self.user_service.create(
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                password=data.password,
            )
        except ConflictError as e:
            self.service.log_event("user.register.conflict", {"reason": e.message})
            return JSONResponse(
                status_code=e.status_code,
                content=error_envelope([
                    error_item(type(e).__name__, e.message, "email", "body"),
                ]),
            )

        self.service.log_event("user.registered", {"id": user.id, "role": user.role})

        await self._sign_in(user, response)
        response.status_code = status.HTTP_201_CREATED
        return {"id": user.id}

    async def login(self, data: LoginRequest, response: Response):
        user = await self.user_service.authenticate(data.email, data.password)
        if user is None:
            self.service.log_event("user.login.failed", {})
            raise ValidationError("Email or password does not match.")

        await self._sign_in(user, response)
        self.service.log_event("user.login", {"id": user.id})
        return {"id": user.id}

    async def get_self(self, token_data: TokenData) -> UserOut:
        user = await self.user_service.find_by_id(token_data.user_id)
        if user is None:
            raise AuthenticationError("User not found")
        return UserOut.model_validate(user)

    async def refresh(self, token_data: TokenData, response: Response) -> Dict[str, Any]:
        """Rotate the refresh token: revoke the presented one and issue a new pair."""
        record = await self.refresh_tokens.find_by_id(token_data.token_id)
        if record is None or record.user_id != token_data.user_id:
            raise AuthenticationError("Refresh token has been revoked")

        user = await self.user_service.find_by_id(token_data.user_id)
        if user is None:
            raise AuthenticationError("User not found")

        await self.refresh_tokens.delete_by_id(record.id)
        await self._sign_in(user, response)
        self.service.log_event("token.refreshed", {"id": user.id})
        return {"id": user.id}

    async def logout(
        self, access_data: TokenData, refresh_data: TokenData, response: Response
    ) -> Dict[str, Any]:
        if refresh_data.user_id != access_data.user_id:
            raise AuthenticationError("Refresh token does not belong to the current user")

        await self.refresh_tokens.delete_by_id(refresh_data.token_id)
        self._clear_auth_cookies(response)
        self.service.log_event("user.logout", {"id": access_data.user_id})
        return {}

    async def _sign_in(self, user: User, response: Response):
        claims = {"sub": str(user.id), "role": user.role}
        access_token = self.token_issuer.issue_access(claims)

        record = await self.refresh_tokens.create(
            user.id, self.token_issuer.refresh_expires_at()
        )
        refresh_token = self.token_issuer.issue_refresh(claims, record.id)

        self._set_auth_cookies(response, access_token, refresh_token)

    def _set_auth_cookies(self, response: Response, access_token: str, refresh_token: str):
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            access_token,
            max_age=int(self.token_issuer.access_lifetime.total_seconds()),
            domain=self.config.cookie_domain,
            secure=self.config.cookie_secure,
            httponly=True,
            samesite="strict",
        )
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            refresh_token,
            max_age=int(self.token_issuer.refresh_lifetime.total_seconds()),
            domain=self.config.cookie_domain,
            secure=self.config.cookie_secure,
            httponly=True,
            samesite="strict",
        )

    def _clear_auth_cookies(self, response: Response):
        for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
            response.delete_cookie(
                name,
                domain=self.config.cookie_domain,
                secure=self.config.cookie_secure,
                httponly=True,
                samesite="strict",
            )
