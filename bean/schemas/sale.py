"""Point of sale and bill scan schemas"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID

class SaleItem(BaseModel):
    product_id: Optional[str] = None
    product_name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=1, le=1000)
    price: float = Field(..., ge=0)

class CreateSaleRequest(BaseModel):
    items: List[SaleItem] = Field(..., min_length=1)
    payment_method: str = Field("Cash", pattern="^(Cash|Card)$")
    customer_name: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=32)

class SaleResponse(BaseModel):
    id: UUID
    bill_number: str
    qr_code_id: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[SaleItem]
    subtotal: float
    tax: float
    total_amount: float
    payment_method: str
    is_scanned: bool
    scanned_by: Optional[str] = None
    scanned_at: Optional[datetime] = None
    points_awarded: Optional[int] = None
    points_to_earn: int = 0
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class BillScanRequest(BaseModel):
    # Missing id is reported by the service as a 400, not a 422
    qrCodeId: Optional[str] = None

class BillScanResponse(BaseModel):
    success: bool = True
    points_awarded: int
    new_balance: int
    referral_bonus: int = 0
    tier: str
