"""Flash drop schemas"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

class FlashDropCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    status: str = Field("upcoming", pattern="^(upcoming|active|ended)$")
    start_time: datetime
    end_time: datetime
    total_items: int = Field(..., ge=1, le=100000)
    points_reward: Optional[int] = Field(None, ge=0)

class FlashDropStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(upcoming|active|ended)$")

class FlashDropResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    start_time: datetime
    end_time: datetime
    total_items: int
    items_remaining: int
    points_reward: int

    model_config = {"from_attributes": True}

class FlashDropClaimResponse(BaseModel):
    success: bool = True
    points_awarded: int
    new_balance: int
    items_remaining: int
