"""Customer, activity and tier schemas"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime
from uuid import UUID

class CustomerResponse(BaseModel):
    id: UUID
    email: str
    referral_code: str
    referred_by: Optional[str] = None
    points_balance: int
    total_points_earned: int
    tier: str
    discount_percent: int = 0
    referral_count: int
    cups_redeemed: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ActivityResponse(BaseModel):
    id: UUID
    user_email: str
    action_type: str
    description: Optional[str] = None
    points_amount: int
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="activity_metadata")
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class TierProgressResponse(BaseModel):
    tier: str
    discount_percent: int
    total_points_earned: int
    points_balance: int
    next_tier: Optional[str] = None
    next_tier_threshold: Optional[int] = None
    points_to_next_tier: Optional[int] = None

class TierInfo(BaseModel):
    tier: str
    min_points: int
    discount_percent: int

class ReferredCustomerResponse(BaseModel):
    email: str
    tier: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class LeaderboardEntry(BaseModel):
    rank: int
    email: str
    tier: str
    total_points_earned: int
