"""
Function endpoints called directly by the mobile client
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bean.core.config import settings
from bean.core.database import get_db
from bean.middleware.rate_limit import limiter
from bean.models import User
from bean.api.v1.auth.dependencies import get_current_user
from bean.schemas.sale import BillScanRequest, BillScanResponse
from bean.services.bill_scan_service import BillScanService

router = APIRouter()

@router.post(
    "/processBillScan",
    response_model=BillScanResponse,
    summary="Redeem a receipt QR code",
    description="Award points for a scanned bill. Each code pays out once."
)
@limiter.limit(settings.RATE_LIMIT_BILL_SCAN)
async def process_bill_scan(
    request: Request,
    body: BillScanRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = BillScanService(db)
    result = await service.process_bill_scan(current_user, body.qrCodeId)
    return BillScanResponse(**result)
