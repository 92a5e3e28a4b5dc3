"""Referral system models"""

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Uuid

from .base import BaseModel

class ReferralCredit(BaseModel):
    """A referral that has been credited; at most one per referred customer"""

    __tablename__ = "referral_credits"

    referrer_customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    referred_customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, unique=True)
    referral_code = Column(String(20), nullable=False)
    points_awarded = Column(Integer, default=0, nullable=False)
    first_scan_bonus_awarded = Column(Boolean, default=False, nullable=False)
