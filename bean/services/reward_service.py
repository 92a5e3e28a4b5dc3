"""Reward catalogue and redemption service"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from bean.core.exceptions import (
    AlreadyRedeemedException,
    BadRequestException,
    NotFoundException
)
from bean.core.security import SecurityUtils
from bean.models import ActivityType, Customer, Redemption, Reward, User, REWARD_CATEGORIES
from bean.services.ledger import PointsLedger
from bean.store import EntityStore

logger = logging.getLogger(__name__)

REDEMPTION_CODE_LENGTH = 8
CUP_CATEGORY = "Drinks"

class RewardService:
    """Service for spending points on rewards"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)
        self.ledger = PointsLedger(db, self.store)

    async def list_rewards(self, category: Optional[str] = None) -> List[Reward]:
        predicate: Dict[str, Any] = {"is_active": True}
        if category and category != "all":
            predicate["category"] = category
        return await self.store.filter("Reward", predicate, sort="points_required")

    async def create_reward(self, fields: Dict[str, Any]) -> Reward:
        if fields.get("category") not in REWARD_CATEGORIES:
            raise BadRequestException(f"Category must be one of {', '.join(REWARD_CATEGORIES)}")
        if int(fields.get("points_required") or 0) <= 0:
            raise BadRequestException("points_required must be positive")

        reward = await self.store.create("Reward", fields)
        await self.db.commit()
        logger.info(f"Reward {reward.name!r} created for {reward.points_required} points")
        return reward

    async def redeem(self, customer: Customer, reward_id: Any) -> Redemption:
        """
        Exchange points for a reward

        The balance is debited with a guarded update, so two redemptions
        racing on the last points cannot both succeed.
        """
        reward = await self.store.get("Reward", reward_id)
        if reward is None or not reward.is_active:
            raise NotFoundException("Reward not found")

        cost = reward.points_required
        cups = 1 if reward.category == CUP_CATEGORY else 0
        extra = {"cups_redeemed": cups} if cups else None

        try:
            customer = await self.ledger.debit(
                customer,
                cost,
                ActivityType.REWARD_REDEEMED,
                f"Redeemed {reward.name}",
                {"reward_id": str(reward.id), "category": reward.category},
                extra=extra,
            )
            redemption = await self.store.create("Redemption", {
                "customer_id": customer.id,
                "customer_email": customer.email,
                "reward_id": reward.id,
                "reward_name": reward.name,
                "points_spent": cost,
                "redemption_code": SecurityUtils.generate_code(REDEMPTION_CODE_LENGTH),
                "status": "pending",
            })
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"{redemption.customer_email} redeemed {redemption.reward_name} ({redemption.redemption_code})")
        return redemption

    async def fulfill(self, staff: User, redemption_code: str) -> Redemption:
        """Staff marks a shown redemption code as handed over"""
        code = redemption_code.strip().upper()
        redemption = await self.store.first("Redemption", {"redemption_code": code})
        if redemption is None:
            raise NotFoundException("Redemption not found")

        fulfilled = await self.store.update_where(
            "Redemption",
            redemption.id,
            {"status": "pending"},
            {
                "status": "fulfilled",
                "fulfilled_at": datetime.now(timezone.utc),
                "fulfilled_by": staff.email,
            }
        )
        if not fulfilled:
            raise AlreadyRedeemedException("This redemption code has already been used")

        await self.db.commit()
        return await self.store.get("Redemption", redemption.id, refresh=True)

    async def list_redemptions(self, customer: Customer, limit: int = 20) -> List[Redemption]:
        return await self.store.filter(
            "Redemption",
            {"customer_id": customer.id},
            sort="-created_at",
            limit=limit
        )
