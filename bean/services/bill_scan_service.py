"""Point of sale and bill scan redemption service"""

from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import math

from bean.core.config import settings
from bean.core.exceptions import (
    AlreadyRedeemedException,
    BadRequestException,
    NotFoundException,
    UnauthorizedException
)
from bean.core.security import SecurityUtils
from bean.models import ActivityType, Customer, StoreSale, User
from bean.services.ledger import PointsLedger
from bean.store import EntityStore

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("Cash", "Card")
CENT = Decimal("0.01")

def points_for_amount(amount: Any) -> int:
    """10 points per 1000 spent: floor(amount / 100)"""
    value = Decimal(str(amount or 0))
    if value <= 0:
        return 0
    return math.floor(value / settings.POINTS_PER_CURRENCY_DIVISOR)

def tax_rate_for(payment_method: str) -> Decimal:
    rate = settings.TAX_RATE_CARD if payment_method == "Card" else settings.TAX_RATE_CASH
    return Decimal(str(rate))

class BillScanService:
    """Service for till sales and receipt QR redemption"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = EntityStore(db)
        self.ledger = PointsLedger(db, self.store)

    async def create_sale(
        self,
        cashier: User,
        items: List[Dict[str, Any]],
        payment_method: str = "Cash",
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None
    ) -> StoreSale:
        """Record a till sale and issue its receipt QR code"""
        if not items:
            raise BadRequestException("A sale needs at least one item")
        if payment_method not in PAYMENT_METHODS:
            raise BadRequestException(f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")

        subtotal = sum(
            (Decimal(str(item["price"])) * int(item["quantity"]) for item in items),
            Decimal("0")
        ).quantize(CENT, rounding=ROUND_HALF_UP)
        tax = (subtotal * tax_rate_for(payment_method)).quantize(CENT, rounding=ROUND_HALF_UP)
        total = subtotal + tax

        sale = await self.store.create("StoreSale", {
            "bill_number": SecurityUtils.generate_bill_number(),
            "qr_code_id": SecurityUtils.generate_qr_code_id(),
            "customer_name": customer_name or None,
            "customer_phone": customer_phone or None,
            "items": [
                {
                    "product_id": item.get("product_id"),
                    "product_name": item["product_name"],
                    "quantity": int(item["quantity"]),
                    "price": float(item["price"]),
                }
                for item in items
            ],
            "subtotal": subtotal,
            "tax": tax,
            "total_amount": total,
            "payment_method": payment_method,
            "is_scanned": False,
            "created_by": cashier.email,
        })
        await self.db.commit()

        logger.info(f"Sale {sale.bill_number} recorded by {cashier.email}: total {total}")
        return sale

    async def list_sales(self, limit: int = 50, scanned: Optional[bool] = None) -> List[StoreSale]:
        predicate = {} if scanned is None else {"is_scanned": scanned}
        return await self.store.filter("StoreSale", predicate, sort="-created_at", limit=limit)

    async def process_bill_scan(self, user: Optional[User], qr_code_id: Optional[str]) -> Dict[str, Any]:
        """
        Award points for a receipt QR code, once

        The sale is claimed with a conditional update (is_scanned false ->
        true); the points are only credited when that claim wins. Claim,
        credit and activity commit together or not at all.
        """
        if user is None:
            raise UnauthorizedException()

        qr_code_id = (qr_code_id or "").strip()
        if not qr_code_id:
            raise BadRequestException("QR code ID is required")

        sale = await self.store.first("StoreSale", {"qr_code_id": qr_code_id})
        if sale is None:
            raise NotFoundException("Invalid QR code")

        if sale.is_scanned:
            logger.warning(f"Repeat scan of {qr_code_id} by {user.email}")
            raise AlreadyRedeemedException()

        points = points_for_amount(sale.total_amount)

        customer = await self.store.first("Customer", {"user_id": user.id})
        if customer is None:
            raise NotFoundException("Customer profile not found")

        email = user.email
        sale_id, bill_number = sale.id, sale.bill_number

        try:
            claimed = await self.store.update_where(
                "StoreSale",
                sale_id,
                {"is_scanned": False},
                {
                    "is_scanned": True,
                    "scanned_by": email,
                    "scanned_at": datetime.now(timezone.utc),
                    "points_awarded": points,
                }
            )
            if not claimed:
                logger.warning(f"Lost redemption race for {qr_code_id} ({email})")
                raise AlreadyRedeemedException()

            customer = await self.ledger.credit(
                customer,
                points,
                ActivityType.POINTS_EARNED,
                f"Scanned bill {bill_number}",
                {"bill_number": bill_number, "qr_code_id": qr_code_id},
            )
            customer, referral_bonus = await self._award_first_scan_bonus(customer)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Bill {bill_number} redeemed by {email} for {points} points")
        return {
            "success": True,
            "points_awarded": points,
            "new_balance": customer.points_balance,
            "referral_bonus": referral_bonus,
            "tier": customer.tier,
        }

    async def _award_first_scan_bonus(self, customer: Customer) -> Tuple[Customer, int]:
        """Referred customers and their referrer each get a one-off bonus on the first scan"""
        bonus = settings.REFERRAL_FIRST_SCAN_BONUS
        if bonus <= 0 or not customer.referred_by:
            return customer, 0

        credit = await self.store.first(
            "ReferralCredit",
            {"referred_customer_id": customer.id, "first_scan_bonus_awarded": False}
        )
        if credit is None:
            return customer, 0

        flipped = await self.store.update_where(
            "ReferralCredit",
            credit.id,
            {"first_scan_bonus_awarded": False},
            {"first_scan_bonus_awarded": True}
        )
        if not flipped:
            return customer, 0

        # referral_count was already bumped when the friend signed up
        referrer = await self.store.get("Customer", credit.referrer_customer_id)
        if referrer is not None:
            await self.ledger.credit(
                referrer,
                bonus,
                ActivityType.REFERRAL,
                "Referral made their first purchase!",
                {"referred_email": customer.email},
            )

        customer = await self.ledger.credit(
            customer,
            bonus,
            ActivityType.REFERRAL,
            "Referral bonus unlocked!",
            {"referrer_email": customer.referred_by},
        )
        return customer, bonus
