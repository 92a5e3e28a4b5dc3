"""In-store point of sale records"""

from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, JSON, Index

from .base import BaseModel

class StoreSale(BaseModel):
    """A completed till sale whose receipt carries a scannable QR code"""

    __tablename__ = "store_sales"

    bill_number = Column(String(32), nullable=False, index=True)
    qr_code_id = Column(String(64), unique=True, nullable=False, index=True)

    customer_name = Column(String(255))
    customer_phone = Column(String(32))
    items = Column(JSON, default=list, nullable=False)

    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(20), nullable=False, default="Cash")
    created_by = Column(String(255))

    # Redemption state, written once
    is_scanned = Column(Boolean, default=False, nullable=False)
    scanned_by = Column(String(255))
    scanned_at = Column(DateTime(timezone=True))
    points_awarded = Column(Integer)

    __table_args__ = (
        Index("idx_store_sales_scanned", "is_scanned", "created_at"),
    )
