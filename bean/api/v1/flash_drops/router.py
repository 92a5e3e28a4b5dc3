"""Flash drop routes"""

from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bean.core.database import get_db
from bean.models import User
from bean.api.v1.auth.dependencies import get_current_user, require_admin
from bean.schemas.flash_drop import (
    FlashDropClaimResponse,
    FlashDropCreate,
    FlashDropResponse,
    FlashDropStatusUpdate
)
from bean.services.customer_service import CustomerService
from bean.services.flash_drop_service import FlashDropService

router = APIRouter()

@router.get("", response_model=List[FlashDropResponse])
async def list_flash_drops(
    status_filter: str = Query("active", alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    drops = await FlashDropService(db).list_drops(status_filter)
    return [FlashDropResponse.model_validate(drop) for drop in drops]

@router.post("", response_model=FlashDropResponse, status_code=status.HTTP_201_CREATED)
async def create_flash_drop(
    request: FlashDropCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    drop = await FlashDropService(db).create_drop(request.model_dump(exclude_none=True))
    return FlashDropResponse.model_validate(drop)

@router.patch("/{drop_id}/status", response_model=FlashDropResponse)
async def update_flash_drop_status(
    drop_id: UUID,
    request: FlashDropStatusUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    drop = await FlashDropService(db).set_status(drop_id, request.status)
    return FlashDropResponse.model_validate(drop)

@router.post("/{drop_id}/claim", response_model=FlashDropClaimResponse)
async def claim_flash_drop(
    drop_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Claim one item and earn the drop's points"""
    customer = await CustomerService(db).require_customer(current_user)
    result = await FlashDropService(db).claim(customer, drop_id)
    return FlashDropClaimResponse(**result)
