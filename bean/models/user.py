"""
User model
Handles authentication and profile information
"""

from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey, Uuid
import enum

from .base import BaseModel

class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"

class User(BaseModel):
    """Authenticated account"""

    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100))
    avatar_url = Column(String(500))
    role = Column(Enum(UserRole, native_enum=False), default=UserRole.CUSTOMER, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

class RevokedToken(BaseModel):
    """Access tokens invalidated by logout"""

    __tablename__ = "revoked_tokens"

    jti = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
