"""
JWT token handling for authentication.

This module provides functionality for:
- Creating access and refresh tokens
- Validating tokens

Access and refresh tokens are signed with separate secrets, so a refresh token
can never be presented where an access token is expected and vice versa.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import PyJWTError
from pydantic import BaseModel

from auth_service.config import Config
from auth_service.errors import TokenError


class TokenData(BaseModel):
    """Token payload model."""
    user_id: int
    role: str
    token_id: Optional[int] = None
    exp: Optional[int] = None  # Expiration time


class TokenIssuer:
    """Signs and verifies access and refresh tokens."""

    def __init__(self, config: Config):
        self.algorithm = config.jwt_algorithm
        self.issuer = config.jwt_issuer
        self.access_secret = config.jwt_access_secret
        self.refresh_secret = config.jwt_refresh_secret
        self.access_lifetime = timedelta(minutes=config.access_token_expire_minutes)
        self.refresh_lifetime = timedelta(days=config.refresh_token_expire_days)

    def _encode(self, claims: Dict[str, Any], secret: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = claims.copy()
        to_encode.update({"iat": now, "exp": now + lifetime, "iss": self.issuer})
        try:
            return jwt.encode(to_encode, secret, algorithm=self.algorithm)
        except (PyJWTError, TypeError, ValueError, NotImplementedError) as e:
            raise TokenError(f"Could not sign token: {e}") from e

    def issue_access(self, claims: Dict[str, Any]) -> str:
        """
        Create a JWT access token.

        Args:
            claims: Payload data, at least ``sub`` and ``role``

        Returns:
            Encoded JWT token string
        """
        return self._encode(claims, self.access_secret, self.access_lifetime)

    def issue_refresh(self, claims: Dict[str, Any], token_id: int) -> str:
        """
        Create a JWT refresh token bound to a persisted refresh token record.

        Args:
            claims: Payload data, at least ``sub`` and ``role``
            token_id: Id of the stored refresh token, carried as ``jti``

        Returns:
            Encoded JWT refresh token string
        """
        to_encode = dict(claims, jti=str(token_id))
        return self._encode(to_encode, self.refresh_secret, self.refresh_lifetime)

    def _decode(self, token: str, secret: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "sub", "iss"]},
            )
        except PyJWTError:
            return None

    @staticmethod
    def _to_token_data(payload: Dict[str, Any]) -> Optional[TokenData]:
        try:
            token_id = payload.get("jti")
            return TokenData(
                user_id=int(payload["sub"]),
                role=payload["role"],
                token_id=int(token_id) if token_id is not None else None,
                exp=payload.get("exp"),
            )
        except (KeyError, ValueError, TypeError):
            # sub/jti not integers, or role missing
            return None

    def verify_access(self, token: str) -> Optional[TokenData]:
        """Return the token data of a valid access token, None otherwise."""
        payload = self._decode(token, self.access_secret)
        if payload is None:
            return None
        return self._to_token_data(payload)

    def verify_refresh(self, token: str) -> Optional[TokenData]:
        """Return the token data of a valid refresh token, None otherwise."""
        payload = self._decode(token, self.refresh_secret)
        if payload is None:
            return None
        data = self._to_token_data(payload)
        if data is None or data.token_id is None:
            return None
        return data

    def refresh_expires_at(self) -> datetime:
        """Expiry for a refresh token record created now."""
        return datetime.now(timezone.utc) + self.refresh_lifetime
