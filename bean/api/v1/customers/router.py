"""Customer profile, tier, activity and referral routes"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bean.core.config import settings
from bean.core.database import get_db
from bean.models import Customer, User
from bean.api.v1.auth.dependencies import get_current_user
from bean.schemas.customer import (
    ActivityResponse,
    CustomerResponse,
    LeaderboardEntry,
    ReferredCustomerResponse,
    TierProgressResponse
)
from bean.services.customer_service import CustomerService
from bean.services.tier import get_tier_discount

router = APIRouter()

def to_customer_response(customer: Customer) -> CustomerResponse:
    response = CustomerResponse.model_validate(customer)
    response.discount_percent = get_tier_discount(customer.tier)
    return response

@router.get("/me", response_model=CustomerResponse)
async def get_my_profile(
    ref: Optional[str] = Query(None, max_length=20, description="Referral code from the invite link"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the loyalty profile, creating it on the first visit"""
    service = CustomerService(db)
    customer, _ = await service.ensure_customer(current_user, referral_code=ref)
    return to_customer_response(customer)

@router.get("/me/tier", response_model=TierProgressResponse)
async def get_my_tier(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = CustomerService(db)
    customer = await service.require_customer(current_user)
    return TierProgressResponse(**service.tier_summary(customer))

@router.get("/me/activity", response_model=List[ActivityResponse])
async def get_my_activity(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Recent points activity, newest first"""
    service = CustomerService(db)
    customer = await service.require_customer(current_user)
    activities = await service.get_activity(customer, limit=limit)
    return [ActivityResponse.model_validate(activity) for activity in activities]

@router.get("/me/referrals", response_model=List[ReferredCustomerResponse])
async def get_my_referrals(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Customers who joined with my referral code"""
    service = CustomerService(db)
    customer = await service.require_customer(current_user)
    referred = await service.get_referred_customers(customer)
    return [ReferredCustomerResponse.model_validate(item) for item in referred]

@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    limit: int = Query(settings.LEADERBOARD_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = CustomerService(db)
    customers = await service.get_leaderboard(limit=limit)
    return [
        LeaderboardEntry(
            rank=index + 1,
            email=customer.email,
            tier=customer.tier,
            total_points_earned=customer.total_points_earned
        )
        for index, customer in enumerate(customers)
    ]
