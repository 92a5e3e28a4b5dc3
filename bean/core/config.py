"""
Settings for the rewards API, read from the environment and .env
"""

from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache

class Settings(BaseSettings):
    """Runtime configuration"""

    # Service
    APP_NAME: str = "BEAN Rewards API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Storage
    DATABASE_URL: str
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_TIMEOUT: int = 30

    # Auth
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    PASSWORD_MIN_LENGTH: int = 8

    # Browser clients
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]
    CORS_ALLOW_CREDENTIALS: bool = True

    # slowapi limits
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_DEFAULT: str = "1000/hour"
    RATE_LIMIT_AUTH: str = "5/minute"
    RATE_LIMIT_BILL_SCAN: str = "10/minute"

    # Loyalty rules
    WELCOME_BONUS_POINTS: int = 50
    REFERRAL_BONUS_POINTS: int = 100
    REFERRAL_FIRST_SCAN_BONUS: int = 100
    FLASH_DROP_CLAIM_POINTS: int = 25
    POINTS_PER_CURRENCY_DIVISOR: int = 100
    EMIT_TIER_UPGRADE_ACTIVITY: bool = True

    # Point of sale tax
    TAX_RATE_CARD: float = 0.05
    TAX_RATE_CASH: float = 0.17

    # Listing sizes
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    LEADERBOARD_SIZE: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url_async(self) -> str:
        """DATABASE_URL with the async driver filled in"""
        for plain, driver in (("postgresql://", "postgresql+asyncpg://"), ("sqlite://", "sqlite+aiosqlite://")):
            if self.DATABASE_URL.startswith(plain):
                return driver + self.DATABASE_URL[len(plain):]
        return self.DATABASE_URL

@lru_cache()
def get_settings() -> Settings:
    """Settings are loaded once per process"""
    return Settings()

settings = get_settings()
