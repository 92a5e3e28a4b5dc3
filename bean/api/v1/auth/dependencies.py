"""
Authentication dependencies
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from bean.core.database import get_db
from bean.core.security import SecurityUtils
from bean.core.exceptions import BeanException, ForbiddenException, UnauthorizedException
from bean.models import User
from bean.services.auth_service import AuthService

# Missing credentials are reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get current authenticated user (required)
    Raises 401 if not authenticated, token revoked or user inactive
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    payload = SecurityUtils.decode_token(credentials.credentials)
    if payload.get("type") != "access":
        raise UnauthorizedException("Invalid token type")

    service = AuthService(db)
    if payload.get("jti") and await service.is_token_revoked(payload["jti"]):
        raise UnauthorizedException("Token has been revoked")

    user = await service.store.get("User", payload.get("sub"))
    if user is None or not user.is_active:
        raise UnauthorizedException("User not found or inactive")

    request.state.user_id = str(user.id)
    request.state.token_payload = payload
    return user

async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Get current user if authenticated, otherwise None
    """
    if credentials is None:
        return None
    try:
        return await get_current_user(request, credentials, db)
    except BeanException:
        return None

async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Staff-only routes"""
    if not current_user.is_admin:
        raise ForbiddenException("Admin access required")
    return current_user
