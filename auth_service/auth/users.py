"""
User management service.

This module provides functionality for:
- User registration
- Credential checks for login
- User listing
"""
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from auth_service.auth.hashing import PasswordHasher
from auth_service.auth.models import Roles, User
from auth_service.auth.repositories import UserRepository
from auth_service.errors import ConflictError


class UserService:
    """
    Service for user management operations.
    """
    def __init__(self, users: UserRepository, hasher: PasswordHasher):
        self.users = users
        self.hasher = hasher

    async def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
    ) -> User:
        """
        Register a new customer.

        Args:
            first_name: First name as submitted
            last_name: Last name as submitted
            email: Trimmed, lowercased email
            password: Plaintext password, hashed before it is stored

        Returns:
            The stored user

        Raises:
            ConflictError: If the email is already registered
        """
        existing_user = await self.users.find_by_email(email)
        if existing_user is not None:
            raise ConflictError("Email already exists!")

        hashed_password = await run_in_threadpool(self.hasher.hash, password)

        # The unique constraint still guards against a concurrent registration
        return await self.users.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=hashed_password,
            role=Roles.CUSTOMER,
        )

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.users.find_by_id(user_id)

    async def find_all(self) -> List[User]:
        return await self.users.find_all()

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user if the password matches, None otherwise."""
        user = await self.users.find_by_email(email)
        if user is None:
            return None
        if not await run_in_threadpool(self.hasher.verify, password, user.password):
            return None
        return user
