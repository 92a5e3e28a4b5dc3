"""
Authentication service layer
Handles registration, login, profile updates and logout
"""

from typing import Any, Dict
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import logging

from bean.models import User, UserRole
from bean.core.security import SecurityUtils
from bean.core.exceptions import (
    BadRequestException,
    UnauthorizedException,
    DuplicateResourceException,
    NotFoundException
)
from bean.store import EntityStore

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("full_name", "avatar_url")

class AuthService:
    """Authentication service"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)

    async def register(
        self,
        email: str,
        password: str,
        full_name: str = None,
        role: UserRole = UserRole.CUSTOMER
    ) -> User:
        """
        Create a new account

        Raises:
            BadRequestException: If the password is too weak
            DuplicateResourceException: If the email is taken
        """
        email = email.strip().lower()
        is_valid, message = SecurityUtils.validate_password(password)
        if not is_valid:
            raise BadRequestException(message, error_code="WEAK_PASSWORD")

        if await self.store.first("User", {"email": email}):
            raise DuplicateResourceException("User", "email", email)

        try:
            user = await self.store.create("User", {
                "email": email,
                "password_hash": SecurityUtils.hash_password(password),
                "full_name": full_name,
                "role": role,
            })
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("User", "email", email)

        logger.info(f"Registered user {user.id}")
        return user

    async def login_via_email_password(self, email: str, password: str) -> User:
        """Check credentials and stamp last_login"""
        user = await self.store.first("User", {"email": email.strip().lower()})

        if not user or not SecurityUtils.verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {email}")
            raise UnauthorizedException("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedException("Account is disabled")

        user.last_login = datetime.now(timezone.utc)
        await self.db.commit()
        return user

    def generate_token(self, user: User) -> Dict[str, Any]:
        token = SecurityUtils.create_access_token({
            "sub": str(user.id),
            "email": user.email,
            "role": UserRole(user.role).value,
        })
        return {"access_token": token, "token_type": "bearer"}

    async def me(self, user_id: Any) -> User:
        user = await self.store.get("User", user_id)
        if not user or not user.is_active:
            raise NotFoundException("User not found")
        return user

    async def update_me(self, user: User, fields: Dict[str, Any]) -> User:
        """Update the caller's own profile fields"""
        changes = {key: value for key, value in fields.items() if key in PROFILE_FIELDS}
        if changes:
            user = await self.store.update("User", user.id, changes)
            await self.db.commit()
        return user

    async def is_token_revoked(self, jti: str) -> bool:
        return await self.store.first("RevokedToken", {"jti": jti}) is not None

    async def logout(self, user: User, payload: Dict[str, Any]) -> None:
        """Revoke the presented access token"""
        jti = payload.get("jti")
        if not jti or await self.is_token_revoked(jti):
            return

        await self.store.create("RevokedToken", {
            "jti": jti,
            "user_id": user.id,
            "expires_at": datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        })
        await self.db.commit()
        logger.info(f"User {user.id} logged out")
