"""
Authentication schemas for request/response validation
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

from bean.models.user import UserRole

class RegisterRequest(BaseModel):
    """User registration request"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: Optional[str] = Field(None, max_length=100)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@beancoffee.com",
                "password": "latte4life",
                "full_name": "Jane Doe"
            }
        }
    }

class LoginRequest(BaseModel):
    """Email and password login"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

class UpdateMeRequest(BaseModel):
    """Profile fields a user may change"""
    full_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = {"from_attributes": True}

class AuthResponse(BaseModel):
    user: UserResponse
    tokens: TokenResponse

class AuthStatusResponse(BaseModel):
    is_authenticated: bool
