"""Points ledger service"""

from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from bean.core.config import settings
from bean.core.exceptions import InsufficientPointsException, NotFoundException
from bean.models import Activity, ActivityType, Customer
from bean.services.tier import calculate_tier, tier_rank
from bean.store import EntityStore

logger = logging.getLogger(__name__)

class PointsLedger:
    """
    Single entry point for changing a customer's points.

    Each change is an in-SQL increment on the customer row, an Activity row
    carrying the same signed delta, and a tier recomputation, all inside the
    caller's transaction. Nothing is committed here.
    """

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    async def credit(
        self,
        customer: Customer,
        points: int,
        action_type: ActivityType,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, int]] = None
    ) -> Customer:
        """Add points to balance and lifetime total"""
        if points < 0:
            raise ValueError("credit requires a non-negative amount")

        deltas = {"points_balance": points, "total_points_earned": points}
        deltas.update(extra or {})

        if not await self.store.increment("Customer", customer.id, deltas):
            raise NotFoundException("Customer profile not found")

        await self._record(customer, points, action_type, description, metadata)
        return await self._reload_and_sync_tier(customer)

    async def debit(
        self,
        customer: Customer,
        points: int,
        action_type: ActivityType,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, int]] = None
    ) -> Customer:
        """Spend points; the balance never goes below zero"""
        if points < 0:
            raise ValueError("debit requires a non-negative amount")

        deltas = {"points_balance": -points}
        deltas.update(extra or {})

        spent = await self.store.increment(
            "Customer",
            customer.id,
            deltas,
            minimums={"points_balance": points}
        )
        if not spent:
            logger.warning(f"Debit of {points} points refused for customer {customer.id}")
            raise InsufficientPointsException(points)

        await self._record(customer, -points, action_type, description, metadata)
        return await self._reload_and_sync_tier(customer)

    async def _record(
        self,
        customer: Customer,
        points: int,
        action_type: ActivityType,
        description: str,
        metadata: Optional[Dict[str, Any]]
    ) -> Activity:
        return await self.store.create("Activity", {
            "customer_id": customer.id,
            "user_email": customer.email,
            "action_type": ActivityType(action_type).value,
            "description": description,
            "points_amount": points,
            "activity_metadata": metadata or {},
        })

    async def _reload_and_sync_tier(self, customer: Customer) -> Customer:
        customer = await self.store.get("Customer", customer.id, refresh=True)
        if customer is None:
            raise NotFoundException("Customer profile not found")

        computed = calculate_tier(customer.total_points_earned)
        if customer.tier == computed.value:
            return customer

        previous = customer.tier
        await self.store.update("Customer", customer.id, {"tier": computed.value})
        logger.info(f"Customer {customer.id} moved from {previous} to {computed.value}")

        if settings.EMIT_TIER_UPGRADE_ACTIVITY and tier_rank(computed) > tier_rank(previous):
            await self._record(
                customer,
                0,
                ActivityType.TIER_UPGRADED,
                f"Welcome to {computed.value}!",
                {"from_tier": previous, "to_tier": computed.value},
            )

        return customer
