"""Public tier table"""

from typing import List
from fastapi import APIRouter

from bean.schemas.customer import TierInfo
from bean.services.tier import tier_table

router = APIRouter()

@router.get("", response_model=List[TierInfo])
async def list_tiers():
    """Tier thresholds and member discounts"""
    return [TierInfo(**row) for row in tier_table()]
