"""Append-only points activity log"""

from sqlalchemy import Column, String, Integer, Text, JSON, ForeignKey, Uuid, Index
import enum

from .base import BaseModel

class ActivityType(str, enum.Enum):
    POINTS_EARNED = "points_earned"
    REWARD_REDEEMED = "reward_redeemed"
    REFERRAL = "referral"
    FLASH_DROP_CLAIMED = "flash_drop_claimed"
    TIER_UPGRADED = "tier_upgraded"

class Activity(BaseModel):
    """One row per points-affecting action"""

    __tablename__ = "activities"

    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    user_email = Column(String(255), nullable=False, index=True)
    action_type = Column(String(50), nullable=False)
    description = Column(Text)
    points_amount = Column(Integer, nullable=False, default=0)  # signed
    # "metadata" is reserved on declarative classes
    activity_metadata = Column("metadata", JSON, default=dict)

    __table_args__ = (
        Index("idx_activities_customer_created", "customer_id", "created_at"),
    )
