"""API v1 routes aggregation"""

from fastapi import APIRouter

from .auth.router import router as auth_router
from .customers.router import router as customers_router
from .sales.router import router as sales_router
from .rewards.router import router as rewards_router
from .flash_drops.router import router as flash_drops_router
from .tiers.router import router as tiers_router
# Mounted at the application root by bean.main, not under /api/v1
from .functions.router import router as functions_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(customers_router, prefix="/customers", tags=["Customers"])
api_router.include_router(sales_router, prefix="/sales", tags=["Sales"])
api_router.include_router(rewards_router, prefix="/rewards", tags=["Rewards"])
api_router.include_router(flash_drops_router, prefix="/flash-drops", tags=["Flash Drops"])
api_router.include_router(tiers_router, prefix="/tiers", tags=["Tiers"])

# Export router
router = api_router
