"""
Async engine and session handling
One session per request; flows commit explicitly and whatever is left
open when an error escapes is rolled back
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict
import logging

from .config import settings

logger = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT_SECONDS = 15

def engine_options(url: str) -> Dict[str, Any]:
    """Pool settings for the configured backend"""
    options: Dict[str, Any] = {"echo": settings.DATABASE_ECHO}
    if url.startswith("sqlite"):
        # One connection per checkout; a second writer waits for the file lock
        options["poolclass"] = NullPool
        options["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT_SECONDS}
    else:
        options.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
    return options

engine = create_async_engine(
    settings.database_url_async,
    **engine_options(settings.database_url_async)
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Session that commits on success and rolls back on any error"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session dependency"""
    async with get_db_context() as session:
        yield session

async def init_db() -> None:
    """Create any missing tables"""
    from bean.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Schema ready on {engine.url.get_backend_name()}")

async def drop_db() -> None:
    from bean.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

async def close_db() -> None:
    """Release pooled connections on shutdown"""
    await engine.dispose()
    logger.info("Database engine disposed")
