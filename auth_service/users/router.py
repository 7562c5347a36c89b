"""
User administration router.

Lists registered users; restricted to admins.
"""
from typing import List

from fastapi import APIRouter, Depends

from auth_service.auth.jwt import TokenData
from auth_service.auth.middleware import RBACMiddleware, get_user_service
from auth_service.auth.models import Roles
from auth_service.auth.users import UserService
from auth_service.auth.validators import UserOut

router = APIRouter(tags=["users"])


@router.get("", response_model=List[UserOut])
async def list_users(
    _: TokenData = Depends(RBACMiddleware.has_roles([Roles.ADMIN])),
    user_service: UserService = Depends(get_user_service),
):
    """Return every user, ordered by id."""
    users = await user_service.find_all()
    return [UserOut.model_validate(user) for user in users]
