"""
Security utilities for authentication
Handles JWT tokens, password hashing and code generation
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
import secrets
import string
import re
import time
import uuid

from .config import settings
from .exceptions import UnauthorizedException

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

CODE_ALPHABET = string.ascii_uppercase + string.digits

class SecurityUtils:
    """Password, token and code helpers"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """True when the password matches the stored bcrypt hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def validate_password(password: str) -> tuple[bool, str]:
        """
        Validate password strength
        Returns (is_valid, error_message)
        """
        if len(password) < settings.PASSWORD_MIN_LENGTH:
            return False, f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"

        if not re.search(r"[A-Za-z]", password):
            return False, "Password must contain at least one letter"

        if not re.search(r"\d", password):
            return False, "Password must contain at least one digit"

        return True, ""

    @staticmethod
    def create_access_token(data: Dict[str, Any]) -> str:
        """Create JWT access token with a unique jti for revocation"""
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode.update({"exp": expire, "type": "access", "jti": uuid.uuid4().hex})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """Verify signature and expiry; any failure is a 401"""
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise UnauthorizedException("Invalid authentication credentials")

    @staticmethod
    def generate_code(length: int = 8) -> str:
        """Generate uppercase alphanumeric code"""
        return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))

    @staticmethod
    def generate_referral_code(email: str, suffix_length: int = 4) -> str:
        """Email prefix plus a random suffix, e.g. JANE7K2Q"""
        prefix = re.sub(r"[^A-Z0-9]", "", email.split("@")[0].upper())[:12]
        return prefix + SecurityUtils.generate_code(suffix_length)

    @staticmethod
    def generate_bill_number() -> str:
        """INV- plus the last 8 digits of the millisecond clock"""
        return "INV-" + str(int(time.time() * 1000))[-8:]

    @staticmethod
    def generate_qr_code_id() -> str:
        """Unique token printed on the receipt QR code"""
        return f"QR-{int(time.time() * 1000)}-{SecurityUtils.generate_code(7)}"
