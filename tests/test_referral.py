"""Customer profiles, welcome bonus and referral credits"""

import pytest
from sqlalchemy.exc import IntegrityError

from bean.core.database import AsyncSessionLocal
from bean.services.bill_scan_service import BillScanService
from bean.services.customer_service import CustomerService
from bean.store import EntityStore

from conftest import load_customer, make_customer, make_sale, make_user

class TestEnsureCustomer:

    async def test_new_profile_gets_welcome_bonus(self, customer_user, db):
        customer, created = await CustomerService(db).ensure_customer(customer_user)

        assert created is True
        assert customer.points_balance == 50
        assert customer.total_points_earned == 50
        assert customer.tier == "Bronze"
        assert customer.referral_code.startswith("JANE")
        assert len(customer.referral_code) == 8

        activities = await EntityStore(db).filter("Activity", {"customer_id": customer.id})
        assert [(a.action_type, a.points_amount) for a in activities] == [("points_earned", 50)]

    async def test_second_visit_returns_same_profile(self, customer_user):
        first = await make_customer(customer_user)
        async with AsyncSessionLocal() as session:
            again, created = await CustomerService(session).ensure_customer(customer_user)

        assert created is False
        assert again.id == first.id
        assert again.points_balance == 50

class TestReferral:

    async def test_referrer_is_credited_once(self, customer):
        friend_user = await make_user("alex@beancoffee.com")
        friend = await make_customer(friend_user, referral_code=customer.referral_code)

        assert friend.referred_by == customer.email
        assert friend.points_balance == 50

        referrer = await load_customer(customer.id)
        assert referrer.points_balance == 150
        assert referrer.total_points_earned == 150
        assert referrer.referral_count == 1

        async with AsyncSessionLocal() as session:
            credits = await EntityStore(session).filter("ReferralCredit", {"referred_customer_id": friend.id})
            assert len(credits) == 1
            assert credits[0].referrer_customer_id == customer.id
            assert credits[0].points_awarded == 100

            logged = await EntityStore(session).filter(
                "Activity",
                {"customer_id": customer.id, "action_type": "referral"}
            )
            assert [a.points_amount for a in logged] == [100]
            assert logged[0].activity_metadata == {"referred_email": "alex@beancoffee.com"}

    async def test_code_is_normalized(self, customer):
        friend_user = await make_user("lee@beancoffee.com")
        friend = await make_customer(friend_user, referral_code=f"  {customer.referral_code.lower()} ")

        assert friend.referred_by == customer.email
        assert (await load_customer(customer.id)).points_balance == 150

    async def test_revisit_with_code_does_not_credit_again(self, customer):
        friend_user = await make_user("alex@beancoffee.com")
        await make_customer(friend_user, referral_code=customer.referral_code)
        await make_customer(friend_user, referral_code=customer.referral_code)

        referrer = await load_customer(customer.id)
        assert referrer.points_balance == 150
        assert referrer.referral_count == 1

    async def test_unknown_code_is_ignored(self, customer_user):
        customer = await make_customer(customer_user, referral_code="NOSUCHCODE")
        assert customer.referred_by is None
        assert customer.points_balance == 50

    async def test_self_referral_is_ignored(self, customer, db):
        own = await EntityStore(db).get("Customer", customer.id)
        credited = await CustomerService(db).credit_referral(own, own.referral_code)

        assert credited is False
        assert (await load_customer(customer.id)).points_balance == 50

    async def test_second_credit_for_same_customer_is_refused(self, customer, db):
        other_user = await make_user("kim@beancoffee.com")
        other = await make_customer(other_user)
        friend_user = await make_user("alex@beancoffee.com")
        friend = await make_customer(friend_user, referral_code=customer.referral_code)

        service = CustomerService(db)
        loaded = await service.store.get("Customer", friend.id)
        with pytest.raises(IntegrityError):
            await service.credit_referral(loaded, other.referral_code)
        await db.rollback()

        assert (await load_customer(other.id)).points_balance == 50

    async def test_first_scan_unlocks_bonus_once(self, admin_user, customer):
        friend_user = await make_user("alex@beancoffee.com")
        friend = await make_customer(friend_user, referral_code=customer.referral_code)

        first_sale = await make_sale(admin_user)
        async with AsyncSessionLocal() as session:
            result = await BillScanService(session).process_bill_scan(friend_user, first_sale.qr_code_id)
        assert result["points_awarded"] == 15
        assert result["referral_bonus"] == 100
        assert result["new_balance"] == 165

        second_sale = await make_sale(admin_user)
        async with AsyncSessionLocal() as session:
            result = await BillScanService(session).process_bill_scan(friend_user, second_sale.qr_code_id)
        assert result["referral_bonus"] == 0
        assert result["new_balance"] == 180

        assert (await load_customer(friend.id)).total_points_earned == 180

    async def test_first_scan_pays_the_referrer_too(self, admin_user, customer):
        friend_user = await make_user("alex@beancoffee.com")
        await make_customer(friend_user, referral_code=customer.referral_code)
        assert (await load_customer(customer.id)).points_balance == 150

        sale = await make_sale(admin_user)
        async with AsyncSessionLocal() as session:
            await BillScanService(session).process_bill_scan(friend_user, sale.qr_code_id)

        referrer = await load_customer(customer.id)
        assert referrer.points_balance == 250
        assert referrer.total_points_earned == 250
        assert referrer.referral_count == 1

        async with AsyncSessionLocal() as session:
            logged = await EntityStore(session).filter(
                "Activity",
                {"customer_id": customer.id, "description": "Referral made their first purchase!"}
            )
            assert [a.points_amount for a in logged] == [100]
            assert logged[0].activity_metadata == {"referred_email": "alex@beancoffee.com"}

        second_sale = await make_sale(admin_user)
        async with AsyncSessionLocal() as session:
            await BillScanService(session).process_bill_scan(friend_user, second_sale.qr_code_id)
        assert (await load_customer(customer.id)).points_balance == 250

class TestCustomerQueries:

    async def test_referred_customers_and_leaderboard(self, customer, db):
        for email in ("alex@beancoffee.com", "lee@beancoffee.com"):
            await make_customer(await make_user(email), referral_code=customer.referral_code)

        service = CustomerService(db)
        referrer = await service.store.get("Customer", customer.id)
        referred = await service.get_referred_customers(referrer)
        assert {c.email for c in referred} == {"alex@beancoffee.com", "lee@beancoffee.com"}

        leaders = await service.get_leaderboard(limit=2)
        assert leaders[0].id == customer.id
        assert leaders[0].total_points_earned == 250
        assert len(leaders) == 2

    async def test_tier_summary_includes_balance(self, customer, db):
        summary = CustomerService(db).tier_summary(customer)
        assert summary["tier"] == "Bronze"
        assert summary["points_balance"] == 50
        assert summary["points_to_next_tier"] == 450
