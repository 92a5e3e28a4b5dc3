"""Point of sale routes (admin)"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bean.core.config import settings
from bean.core.database import get_db
from bean.models import StoreSale, User
from bean.api.v1.auth.dependencies import require_admin
from bean.schemas.sale import CreateSaleRequest, SaleResponse
from bean.services.bill_scan_service import BillScanService, points_for_amount

router = APIRouter()

def to_sale_response(sale: StoreSale) -> SaleResponse:
    response = SaleResponse.model_validate(sale)
    response.points_to_earn = points_for_amount(sale.total_amount)
    return response

@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    request: CreateSaleRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Complete a till sale and issue the receipt QR code"""
    service = BillScanService(db)
    sale = await service.create_sale(
        current_user,
        [item.model_dump() for item in request.items],
        payment_method=request.payment_method,
        customer_name=request.customer_name,
        customer_phone=request.customer_phone
    )
    return to_sale_response(sale)

@router.get("", response_model=List[SaleResponse])
async def list_sales(
    scanned: Optional[bool] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = BillScanService(db)
    sales = await service.list_sales(limit=limit, scanned=scanned)
    return [to_sale_response(sale) for sale in sales]
