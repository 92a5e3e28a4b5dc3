"""Loyalty customer profile"""

from sqlalchemy import Column, String, Integer, ForeignKey, Uuid, CheckConstraint

from .base import BaseModel

class Customer(BaseModel):
    """Points balance, lifetime points and tier of one user"""

    __tablename__ = "customers"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    email = Column(String(255), nullable=False, index=True)

    referral_code = Column(String(20), unique=True, nullable=False, index=True)
    referred_by = Column(String(255), index=True)  # referrer email
    referral_count = Column(Integer, default=0, nullable=False)

    points_balance = Column(Integer, default=0, nullable=False)
    total_points_earned = Column(Integer, default=0, nullable=False)
    tier = Column(String(20), default="Bronze", nullable=False)
    cups_redeemed = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        CheckConstraint("points_balance >= 0", name="check_points_balance_non_negative"),
    )
