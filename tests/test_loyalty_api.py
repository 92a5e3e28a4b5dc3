"""End to end loyalty flows over HTTP"""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import auth_headers, make_user

SALE = {
    "items": [{"product_name": "Flat White", "quantity": 1, "price": 1282.05}],
    "payment_method": "Cash",
}

@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)

@pytest.fixture
def customer_headers(customer_user):
    return auth_headers(customer_user)

async def open_profile(client, headers, ref=None):
    params = {"ref": ref} if ref else None
    response = await client.get("/api/v1/customers/me", headers=headers, params=params)
    assert response.status_code == 200
    return response.json()

async def ring_up_sale(client, headers, sale=SALE):
    response = await client.post("/api/v1/sales", headers=headers, json=sale)
    assert response.status_code == 201
    return response.json()

class TestProfile:

    async def test_first_visit_creates_profile(self, client, customer_headers):
        profile = await open_profile(client, customer_headers)
        assert profile["points_balance"] == 50
        assert profile["tier"] == "Bronze"
        assert profile["discount_percent"] == 0

        again = await open_profile(client, customer_headers)
        assert again["id"] == profile["id"]
        assert again["points_balance"] == 50

    async def test_tier_route_needs_profile(self, client, customer_headers):
        response = await client.get("/api/v1/customers/me/tier", headers=customer_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Customer profile not found"

    async def test_referral_link(self, client, customer_headers):
        referrer = await open_profile(client, customer_headers)

        friend = await make_user("alex@beancoffee.com")
        friend_headers = auth_headers(friend)
        profile = await open_profile(client, friend_headers, ref=referrer["referral_code"])
        assert profile["referred_by"] == "jane@beancoffee.com"

        response = await client.get("/api/v1/customers/me/referrals", headers=customer_headers)
        assert [item["email"] for item in response.json()] == ["alex@beancoffee.com"]

        response = await client.get("/api/v1/customers/leaderboard", headers=friend_headers)
        leaders = response.json()
        assert leaders[0]["email"] == "jane@beancoffee.com"
        assert leaders[0]["rank"] == 1
        assert leaders[0]["total_points_earned"] == 150

    async def test_public_tier_table(self, client):
        response = await client.get("/api/v1/tiers")
        assert response.status_code == 200
        assert [row["discount_percent"] for row in response.json()] == [0, 5, 10, 15]

class TestSales:

    async def test_admin_rings_up_sale(self, client, admin_headers):
        sale = await ring_up_sale(client, admin_headers)

        assert sale["subtotal"] == 1282.05
        assert sale["tax"] == 217.95
        assert sale["total_amount"] == 1500.0
        assert sale["points_to_earn"] == 15
        assert sale["is_scanned"] is False

        response = await client.get("/api/v1/sales", headers=admin_headers, params={"scanned": "false"})
        assert [item["qr_code_id"] for item in response.json()] == [sale["qr_code_id"]]

    async def test_customer_cannot_ring_up_sale(self, client, customer_headers):
        response = await client.post("/api/v1/sales", headers=customer_headers, json=SALE)
        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    async def test_bad_payment_method(self, client, admin_headers):
        response = await client.post("/api/v1/sales", headers=admin_headers, json={**SALE, "payment_method": "Cheque"})
        assert response.status_code == 422

class TestProcessBillScan:

    async def test_scan_then_rescan(self, client, admin_headers, customer_headers):
        await open_profile(client, customer_headers)
        sale = await ring_up_sale(client, admin_headers)

        response = await client.post("/processBillScan", headers=customer_headers, json={"qrCodeId": sale["qr_code_id"]})
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "points_awarded": 15,
            "new_balance": 65,
            "referral_bonus": 0,
            "tier": "Bronze",
        }

        response = await client.post("/processBillScan", headers=customer_headers, json={"qrCodeId": sale["qr_code_id"]})
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "This QR code has already been redeemed. Please use a new one.",
            "error_code": "ALREADY_REDEEMED",
        }

        profile = await open_profile(client, customer_headers)
        assert profile["points_balance"] == 65

        response = await client.get("/api/v1/customers/me/activity", headers=customer_headers)
        latest = response.json()[0]
        assert latest["action_type"] == "points_earned"
        assert latest["points_amount"] == 15
        assert latest["metadata"]["qr_code_id"] == sale["qr_code_id"]

        response = await client.get("/api/v1/sales", headers=admin_headers, params={"scanned": "true"})
        assert response.json()[0]["scanned_by"] == "jane@beancoffee.com"

    async def test_requires_authentication(self, client):
        response = await client.post("/processBillScan", json={"qrCodeId": "QR-1"})
        assert response.status_code == 401

    async def test_missing_qr_code_id(self, client, customer_headers):
        response = await client.post("/processBillScan", headers=customer_headers, json={})
        assert response.status_code == 400
        assert response.json()["error"] == "QR code ID is required"

    async def test_unknown_qr_code(self, client, customer_headers):
        await open_profile(client, customer_headers)
        response = await client.post("/processBillScan", headers=customer_headers, json={"qrCodeId": "QR-nope"})
        assert response.status_code == 404
        assert response.json()["error"] == "Invalid QR code"

class TestRewardsAndDrops:

    async def test_redeem_and_fulfil(self, client, admin_headers, customer_headers):
        await open_profile(client, customer_headers)
        response = await client.post("/api/v1/rewards", headers=admin_headers, json={
            "name": "Free Espresso",
            "category": "Drinks",
            "points_required": 45,
        })
        assert response.status_code == 201
        reward = response.json()

        response = await client.get("/api/v1/rewards", headers=customer_headers, params={"category": "Drinks"})
        assert [item["id"] for item in response.json()] == [reward["id"]]

        response = await client.post(f"/api/v1/rewards/{reward['id']}/redeem", headers=customer_headers)
        assert response.status_code == 201
        code = response.json()["redemption_code"]

        response = await client.post(f"/api/v1/rewards/{reward['id']}/redeem", headers=customer_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INSUFFICIENT_POINTS"

        response = await client.post(f"/api/v1/rewards/redemptions/{code}/fulfill", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "fulfilled"

        profile = await open_profile(client, customer_headers)
        assert profile["points_balance"] == 5
        assert profile["cups_redeemed"] == 1

    async def test_flash_drop_claim(self, client, admin_headers, customer_headers):
        await open_profile(client, customer_headers)
        start = datetime.now(timezone.utc) - timedelta(minutes=5)
        response = await client.post("/api/v1/flash-drops", headers=admin_headers, json={
            "title": "Ethiopia Natural 250g",
            "status": "active",
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(hours=2)).isoformat(),
            "total_items": 3,
        })
        assert response.status_code == 201
        drop = response.json()

        response = await client.get("/api/v1/flash-drops", headers=customer_headers)
        assert [item["id"] for item in response.json()] == [drop["id"]]

        response = await client.post(f"/api/v1/flash-drops/{drop['id']}/claim", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["new_balance"] == 75
        assert response.json()["items_remaining"] == 2

        response = await client.post(f"/api/v1/flash-drops/{drop['id']}/claim", headers=customer_headers)
        assert response.status_code == 409

    async def test_flash_drop_accepts_mixed_offsets(self, client, admin_headers):
        response = await client.post("/api/v1/flash-drops", headers=admin_headers, json={
            "title": "Colombia Decaf 250g",
            "start_time": "2026-01-01T10:00:00",
            "end_time": "2026-01-01T12:00:00+00:00",
            "total_items": 2,
        })
        assert response.status_code == 201

        response = await client.post("/api/v1/flash-drops", headers=admin_headers, json={
            "title": "Colombia Decaf 250g",
            "start_time": "2026-01-01T12:00:00",
            "end_time": "2026-01-01T10:00:00+00:00",
            "total_items": 2,
        })
        assert response.status_code == 400
        assert response.json()["success"] is False

class TestService:

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json()["status"] == "healthy"

    async def test_unknown_route_uses_error_envelope(self, client):
        response = await client.get("/api/v1/espresso")
        assert response.status_code == 404
        assert response.json()["success"] is False
