"""
Authentication API routes
"""

from typing import Optional
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from bean.core.config import settings
from bean.core.database import get_db
from bean.middleware.rate_limit import limiter
from bean.models import User
from .dependencies import get_current_user, get_current_user_optional
from .schemas import (
    RegisterRequest,
    LoginRequest,
    UpdateMeRequest,
    AuthResponse,
    AuthStatusResponse,
    UserResponse,
    TokenResponse
)
from bean.services.auth_service import AuthService

router = APIRouter()

@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create an account with email and password"
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """Register new user"""
    service = AuthService(db)
    user = await service.register(request.email, request.password, request.full_name)

    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**service.generate_token(user))
    )

@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Login user",
    description="Login with email and password"
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login user with email and password"""
    service = AuthService(db)
    user = await service.login_via_email_password(body.email, body.password)

    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**service.generate_token(user))
    )

@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout user",
    description="Revoke the current access token"
)
async def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Logout user"""
    service = AuthService(db)
    await service.logout(current_user, request.state.token_payload)
    return None

@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user"
)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return UserResponse.model_validate(current_user)

@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Update current user"
)
async def update_me(
    request: UpdateMeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = AuthService(db)
    user = await service.update_me(current_user, request.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)

@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(current_user: Optional[User] = Depends(get_current_user_optional)):
    """Whether the request carries a valid session"""
    return AuthStatusResponse(is_authenticated=current_user is not None)
