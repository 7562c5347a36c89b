"""
Persistence access for users and refresh tokens.

Database failures are re-raised as PersistenceError; a unique-constraint
violation on user creation is re-raised as ConflictError.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.auth.models import RefreshToken, Roles, User
from auth_service.errors import ConflictError, PersistenceError


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up user by email: {e}") from e

    async def find_by_id(self, user_id: int) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up user {user_id}: {e}") from e

    async def find_all(self) -> List[User]:
        try:
            result = await self.db.execute(select(User).order_by(User.id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list users: {e}") from e

    async def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: Roles = Roles.CUSTOMER,
    ) -> User:
        """
        Insert a user.

        Args:
            password: The already hashed password

        Raises:
            ConflictError: If the email is already registered
            PersistenceError: On any other database failure
        """
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            role=role.value,
        )
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("Email already exists!") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to store user: {e}") from e
        return user


class RefreshTokenRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, expires_at: datetime) -> RefreshToken:
        token = RefreshToken(user_id=user_id, expires_at=expires_at)
        try:
            self.db.add(token)
            await self.db.commit()
            await self.db.refresh(token)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to store refresh token: {e}") from e
        return token

    async def find_by_id(self, token_id: int) -> Optional[RefreshToken]:
        try:
            result = await self.db.execute(
                select(RefreshToken).where(RefreshToken.id == token_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up refresh token {token_id}: {e}") from e

    async def find_by_user(self, user_id: int) -> List[RefreshToken]:
        try:
            result = await self.db.execute(
                select(RefreshToken)
                .where(RefreshToken.user_id == user_id)
                .order_by(RefreshToken.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list refresh tokens: {e}") from e

    async def delete_by_id(self, token_id: int) -> None:
        try:
            await self.db.execute(delete(RefreshToken).where(RefreshToken.id == token_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to delete refresh token {token_id}: {e}") from e
