"""Reward catalogue and redemption models"""

from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, Uuid

from .base import BaseModel

REWARD_CATEGORIES = ("Drinks", "Food", "Merchandise", "Experience")

class Reward(BaseModel):
    """Item that can be bought with points"""

    __tablename__ = "rewards"

    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(50), nullable=False, default="Drinks", index=True)
    points_required = Column(Integer, nullable=False)
    image_url = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False, index=True)

class Redemption(BaseModel):
    """Points spent on a reward; the code is shown to staff"""

    __tablename__ = "redemptions"

    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_email = Column(String(255), nullable=False)
    reward_id = Column(Uuid(as_uuid=True), ForeignKey("rewards.id"), nullable=False)
    reward_name = Column(String(255), nullable=False)
    points_spent = Column(Integer, nullable=False)
    redemption_code = Column(String(16), unique=True, nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, fulfilled
    fulfilled_at = Column(DateTime(timezone=True))
    fulfilled_by = Column(String(255))
