"""
Authentication router.

This module provides FastAPI router for authentication endpoints:
- Registration and login
- Current user profile
- Refresh token rotation and logout
"""
from fastapi import APIRouter, Depends, Response, status

from auth_service.auth.controller import AuthController
from auth_service.auth.jwt import TokenData
from auth_service.auth.middleware import get_auth_controller, get_current_user, get_refresh_token
from auth_service.auth.validators import LoginRequest, RegisterRequest, UserCreated, UserOut

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserCreated)
async def register(
    user_data: RegisterRequest,
    response: Response,
    controller: AuthController = Depends(get_auth_controller),
):
    """
    Register a new customer.

    Sets the ``accessToken`` and ``refreshToken`` cookies and returns the new
    user's id.
    """
    return await controller.register(user_data, response)


@router.post("/login", response_model=UserCreated)
async def login(
    login_data: LoginRequest,
    response: Response,
    controller: AuthController = Depends(get_auth_controller),
):
    """Authenticate with email and password; sets both token cookies."""
    return await controller.login(login_data, response)


@router.get("/self", response_model=UserOut)
async def get_self(
    token_data: TokenData = Depends(get_current_user),
    controller: AuthController = Depends(get_auth_controller),
):
    return await controller.get_self(token_data)


@router.post("/refresh", response_model=UserCreated)
async def refresh(
    response: Response,
    token_data: TokenData = Depends(get_refresh_token),
    controller: AuthController = Depends(get_auth_controller),
):
    """Exchange a valid refresh token for a new token pair."""
    return await controller.refresh(token_data, response)


@router.post("/logout")
async def logout(
    response: Response,
    access_data: TokenData = Depends(get_current_user),
    refresh_data: TokenData = Depends(get_refresh_token),
    controller: AuthController = Depends(get_auth_controller),
):
    """Revoke the presented refresh token and clear both cookies."""
    return await controller.logout(access_data, refresh_data, response)
