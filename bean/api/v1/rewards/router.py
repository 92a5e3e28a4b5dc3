"""Rewards API router"""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bean.core.config import settings
from bean.core.database import get_db
from bean.models import User
from bean.api.v1.auth.dependencies import get_current_user, require_admin
from bean.schemas.reward import RedemptionResponse, RewardCreate, RewardResponse
from bean.services.customer_service import CustomerService
from bean.services.reward_service import RewardService

router = APIRouter()

@router.get("", response_model=List[RewardResponse])
async def list_rewards(
    category: Optional[str] = Query(None, description="Drinks, Food, Merchandise, Experience or all"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Active rewards, cheapest first"""
    service = RewardService(db)
    rewards = await service.list_rewards(category)
    return [RewardResponse.model_validate(reward) for reward in rewards]

@router.post("", response_model=RewardResponse, status_code=status.HTTP_201_CREATED)
async def create_reward(
    request: RewardCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = RewardService(db)
    reward = await service.create_reward(request.model_dump())
    return RewardResponse.model_validate(reward)

@router.post("/{reward_id}/redeem", response_model=RedemptionResponse, status_code=status.HTTP_201_CREATED)
async def redeem_reward(
    reward_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Spend points on a reward and get the code to show at the counter"""
    customer = await CustomerService(db).require_customer(current_user)
    redemption = await RewardService(db).redeem(customer, reward_id)
    return RedemptionResponse.model_validate(redemption)

@router.get("/redemptions", response_model=List[RedemptionResponse])
async def list_my_redemptions(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    customer = await CustomerService(db).require_customer(current_user)
    redemptions = await RewardService(db).list_redemptions(customer, limit=limit)
    return [RedemptionResponse.model_validate(item) for item in redemptions]

@router.post("/redemptions/{redemption_code}/fulfill", response_model=RedemptionResponse)
async def fulfill_redemption(
    redemption_code: str,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Staff confirms the reward was handed over"""
    redemption = await RewardService(db).fulfill(current_user, redemption_code)
    return RedemptionResponse.model_validate(redemption)
