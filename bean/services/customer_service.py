"""Customer profile and referral crediting service"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import logging

from bean.core.config import settings
from bean.core.exceptions import NotFoundException
from bean.core.security import SecurityUtils
from bean.models import Activity, ActivityType, Customer, User
from bean.services.ledger import PointsLedger
from bean.services.tier import Tier, get_tier_progress
from bean.store import EntityStore

logger = logging.getLogger(__name__)

REFERRAL_CODE_ATTEMPTS = 5

class CustomerService:
    """Service for loyalty profiles and referrals"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)
        self.ledger = PointsLedger(db, self.store)

    async def get_customer(self, user: User) -> Optional[Customer]:
        return await self.store.first("Customer", {"user_id": user.id})

    async def _customer_for(self, user_id: Any) -> Optional[Customer]:
        return await self.store.first("Customer", {"user_id": user_id})

    async def require_customer(self, user: User) -> Customer:
        customer = await self.get_customer(user)
        if customer is None:
            raise NotFoundException("Customer profile not found")
        return customer

    async def ensure_customer(
        self,
        user: User,
        referral_code: Optional[str] = None
    ) -> Tuple[Customer, bool]:
        """
        Return the user's profile, creating it on first visit

        A new profile starts with the welcome bonus. When a referral code is
        supplied with the very first visit, the referrer is credited in the
        same transaction. Returns (customer, created).
        """
        # Rollback expires loaded objects, so keep plain values
        user_id, email = user.id, user.email

        customer = await self._customer_for(user_id)
        if customer is not None:
            return customer, False

        try:
            customer = await self._create_profile(user)
            if referral_code:
                await self.credit_referral(customer, referral_code)
            await self.db.commit()
        except IntegrityError:
            # A concurrent first visit created the profile first
            await self.db.rollback()
            customer = await self._customer_for(user_id)
            if customer is None:
                raise
            logger.info(f"Customer profile for {email} created concurrently")
            return customer, False

        customer = await self.store.get("Customer", customer.id, refresh=True)
        logger.info(f"Created customer profile {customer.id} for {email}")
        return customer, True

    async def _create_profile(self, user: User) -> Customer:
        code = await self._unique_referral_code(user.email)
        customer = await self.store.create("Customer", {
            "user_id": user.id,
            "email": user.email,
            "referral_code": code,
            "points_balance": 0,
            "total_points_earned": 0,
            "tier": Tier.BRONZE.value,
            "referral_count": 0,
            "cups_redeemed": 0,
        })
        return await self.ledger.credit(
            customer,
            settings.WELCOME_BONUS_POINTS,
            ActivityType.POINTS_EARNED,
            "Welcome bonus",
            {"source": "welcome"},
        )

    async def _unique_referral_code(self, email: str) -> str:
        for _ in range(REFERRAL_CODE_ATTEMPTS):
            code = SecurityUtils.generate_referral_code(email)
            if not await self.store.first("Customer", {"referral_code": code}):
                return code
        # Prefix space exhausted for this email, fall back to a random code
        return SecurityUtils.generate_code(10)

    async def credit_referral(self, new_customer: Customer, referral_code: str) -> bool:
        """
        Credit the owner of referral_code for bringing in new_customer

        Unknown codes and self-referrals are ignored silently. The unique
        ReferralCredit row makes a second credit for the same customer fail.
        """
        code = referral_code.strip().upper()
        referrer = await self.store.first("Customer", {"referral_code": code})

        if referrer is None or referrer.id == new_customer.id:
            logger.info(f"Ignoring referral code {code!r} for customer {new_customer.id}")
            return False

        await self.store.update("Customer", new_customer.id, {"referred_by": referrer.email})
        await self.store.create("ReferralCredit", {
            "referrer_customer_id": referrer.id,
            "referred_customer_id": new_customer.id,
            "referral_code": code,
            "points_awarded": settings.REFERRAL_BONUS_POINTS,
        })
        await self.ledger.credit(
            referrer,
            settings.REFERRAL_BONUS_POINTS,
            ActivityType.REFERRAL,
            "A friend joined with your referral code!",
            {"referred_email": new_customer.email},
            extra={"referral_count": 1},
        )

        logger.info(f"Referral credited to {referrer.id} for {new_customer.id}")
        return True

    async def get_activity(self, customer: Customer, limit: int = 20) -> List[Activity]:
        return await self.store.filter(
            "Activity",
            {"customer_id": customer.id},
            sort="-created_at",
            limit=limit
        )

    async def get_referred_customers(self, customer: Customer) -> List[Customer]:
        return await self.store.filter(
            "Customer",
            {"referred_by": customer.email},
            sort="-created_at"
        )

    async def get_leaderboard(self, limit: int = 10) -> List[Customer]:
        return await self.store.list("Customer", sort="-total_points_earned", limit=limit)

    def tier_summary(self, customer: Customer) -> Dict[str, Any]:
        summary = get_tier_progress(customer.total_points_earned)
        summary["points_balance"] = customer.points_balance
        return summary
