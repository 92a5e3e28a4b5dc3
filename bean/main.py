"""Main FastAPI application with all middleware"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from bean import __version__
from bean.core.config import settings
from bean.core.database import close_db, init_db
from bean.core.exceptions import register_exception_handlers
from bean.core.middleware import setup_middleware
from bean.middleware.rate_limit import limiter, custom_rate_limit_handler
from slowapi.errors import RateLimitExceeded

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting up {settings.APP_NAME}...")
    await init_db()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Coffee shop loyalty API: bill scans, points, tiers, referrals, rewards and flash drops",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
register_exception_handlers(app)

# Add middleware
setup_middleware(app)

# Include routers
from bean.api.v1 import api_router, functions_router
app.include_router(api_router, prefix="/api/v1")
app.include_router(functions_router, tags=["Functions"])

# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": __version__}

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "docs": "/api/docs",
        "health": "/health"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "bean.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
