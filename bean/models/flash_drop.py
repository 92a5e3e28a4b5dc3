"""
Flash drops: limited quantity, time-boxed items
"""

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Uuid, Index, CheckConstraint, UniqueConstraint

from .base import BaseModel

FLASH_DROP_STATUSES = ("upcoming", "active", "ended")

class FlashDrop(BaseModel):
    """Limited release that awards points when claimed"""

    __tablename__ = "flash_drops"

    title = Column(String(255), nullable=False)
    description = Column(Text)
    image_url = Column(String(500))
    status = Column(String(20), nullable=False, default="upcoming")

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    total_items = Column(Integer, nullable=False)
    items_remaining = Column(Integer, nullable=False)
    points_reward = Column(Integer, nullable=False, default=25)

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_valid_drop_period"),
        CheckConstraint("items_remaining >= 0", name="check_items_remaining_non_negative"),
        Index("idx_flash_drops_status_start", "status", "start_time"),
    )

class FlashDropClaim(BaseModel):
    """One claim per customer per drop"""

    __tablename__ = "flash_drop_claims"

    flash_drop_id = Column(Uuid(as_uuid=True), ForeignKey("flash_drops.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    user_email = Column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint("flash_drop_id", "customer_id", name="uq_flash_drop_claim_customer"),
    )
