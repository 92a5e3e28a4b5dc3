"""Shared pytest fixtures for the BEAN rewards API"""

import os
import tempfile

# Settings are read at import time, so the environment goes first
_db_dir = tempfile.mkdtemp(prefix="bean-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'bean.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-do-not-use-in-production"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from bean.core.database import AsyncSessionLocal, drop_db, init_db
from bean.core.security import SecurityUtils
from bean.main import app
from bean.models import Customer, StoreSale, User, UserRole
from bean.services.auth_service import AuthService
from bean.services.bill_scan_service import BillScanService
from bean.services.customer_service import CustomerService

PASSWORD = "latte4life"

@pytest.fixture(autouse=True)
async def database():
    """Fresh schema for every test"""
    await init_db()
    yield
    await drop_db()

@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session

@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

async def make_user(email: str, role: UserRole = UserRole.CUSTOMER) -> User:
    async with AsyncSessionLocal() as session:
        return await AuthService(session).register(email, PASSWORD, "Test User", role=role)

async def make_customer(user: User, referral_code: Optional[str] = None) -> Customer:
    async with AsyncSessionLocal() as session:
        customer, _ = await CustomerService(session).ensure_customer(user, referral_code=referral_code)
        return customer

async def make_sale(
    cashier: User,
    items: Optional[List[Dict[str, Any]]] = None,
    payment_method: str = "Cash"
) -> StoreSale:
    items = items or [{"product_name": "Flat White", "quantity": 1, "price": 1282.05}]
    async with AsyncSessionLocal() as session:
        return await BillScanService(session).create_sale(cashier, items, payment_method=payment_method)

async def load_customer(customer_id) -> Customer:
    async with AsyncSessionLocal() as session:
        return await session.get(Customer, customer_id)

def auth_headers(user: User) -> Dict[str, str]:
    token = SecurityUtils.create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": UserRole(user.role).value,
    })
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
async def admin_user() -> User:
    return await make_user("barista@beancoffee.com", role=UserRole.ADMIN)

@pytest.fixture
async def customer_user() -> User:
    return await make_user("jane@beancoffee.com")

@pytest.fixture
async def customer(customer_user) -> Customer:
    return await make_customer(customer_user)
