"""Reward schemas"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

class RewardCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    category: str = Field("Drinks", pattern="^(Drinks|Food|Merchandise|Experience)$")
    points_required: int = Field(..., gt=0, le=100000)
    image_url: Optional[str] = Field(None, max_length=500)
    is_active: bool = True

class RewardResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    category: str
    points_required: int
    image_url: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}

class RedemptionResponse(BaseModel):
    id: UUID
    reward_id: UUID
    reward_name: str
    customer_email: str
    points_spent: int
    redemption_code: str
    status: str
    fulfilled_at: Optional[datetime] = None
    fulfilled_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
