"""Flash drop service"""

from typing import Any, Dict, List
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import logging

from bean.core.config import settings
from bean.core.exceptions import BadRequestException, ConflictException, NotFoundException
from bean.models import ActivityType, Customer, FlashDrop, FLASH_DROP_STATUSES
from bean.services.ledger import PointsLedger
from bean.store import EntityStore

logger = logging.getLogger(__name__)

ENDED_DROPS_LIMIT = 10

def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

class FlashDropService:
    """Service for limited releases"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)
        self.ledger = PointsLedger(db, self.store)

    async def list_drops(self, status: str = "active") -> List[FlashDrop]:
        if status not in FLASH_DROP_STATUSES:
            raise BadRequestException(f"Status must be one of {', '.join(FLASH_DROP_STATUSES)}")

        if status == "ended":
            return await self.store.filter("FlashDrop", {"status": status}, sort="-start_time", limit=ENDED_DROPS_LIMIT)
        return await self.store.filter("FlashDrop", {"status": status}, sort="start_time")

    async def create_drop(self, fields: Dict[str, Any]) -> FlashDrop:
        if fields.get("status", "upcoming") not in FLASH_DROP_STATUSES:
            raise BadRequestException(f"Status must be one of {', '.join(FLASH_DROP_STATUSES)}")

        fields = dict(fields)
        fields["start_time"] = as_utc(fields["start_time"])
        fields["end_time"] = as_utc(fields["end_time"])
        if fields["end_time"] <= fields["start_time"]:
            raise BadRequestException("end_time must be after start_time")

        fields.setdefault("items_remaining", fields["total_items"])
        fields.setdefault("points_reward", settings.FLASH_DROP_CLAIM_POINTS)

        drop = await self.store.create("FlashDrop", fields)
        await self.db.commit()
        logger.info(f"Flash drop {drop.title!r} created with {drop.total_items} items")
        return drop

    async def set_status(self, drop_id: Any, status: str) -> FlashDrop:
        if status not in FLASH_DROP_STATUSES:
            raise BadRequestException(f"Status must be one of {', '.join(FLASH_DROP_STATUSES)}")
        drop = await self.store.update("FlashDrop", drop_id, {"status": status})
        await self.db.commit()
        return drop

    async def claim(self, customer: Customer, drop_id: Any) -> Dict[str, Any]:
        """
        Claim one item of an active drop and earn its points

        One claim per customer (unique claim row); stock is taken with a
        guarded decrement so the last item is never handed out twice.
        """
        drop = await self.store.get("FlashDrop", drop_id)
        if drop is None:
            raise NotFoundException("Flash drop not found")
        if drop.status != "active":
            raise BadRequestException("This flash drop is not active")

        drop_id, title, reward_points = drop.id, drop.title, drop.points_reward
        customer_id = customer.id

        try:
            await self.store.create("FlashDropClaim", {
                "flash_drop_id": drop_id,
                "customer_id": customer_id,
                "user_email": customer.email,
            })
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException("You have already claimed this drop", error_code="ALREADY_CLAIMED")

        try:
            taken = await self.store.increment(
                "FlashDrop",
                drop_id,
                {"items_remaining": -1},
                minimums={"items_remaining": 1}
            )
            if not taken:
                raise BadRequestException("This flash drop is sold out", error_code="SOLD_OUT")

            customer = await self.ledger.credit(
                customer,
                reward_points,
                ActivityType.FLASH_DROP_CLAIMED,
                f"Claimed {title}",
                {"flash_drop_id": str(drop_id)},
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        drop = await self.store.get("FlashDrop", drop_id, refresh=True)
        logger.info(f"Customer {customer_id} claimed flash drop {drop_id}")
        return {
            "success": True,
            "points_awarded": reward_points,
            "new_balance": customer.points_balance,
            "items_remaining": drop.items_remaining,
        }
