from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from cart import Cart
from conditions import ConditionManager
from coupons import CouponManager
from main import create_app
from settings import Settings

NOW = datetime(2025, 6, 22, 12, 0, tzinfo=timezone.utc)
ADMIN_KEY = "test-admin-key"


@pytest.fixture
def clock():
    """Frozen clock so expiry checks don't depend on the wall time."""
    return lambda: NOW


@pytest.fixture
def coupons(clock):
    manager = CouponManager(clock=clock)
    manager.add_coupon({"code": "SAVE10", "discount": 15, "type": "fixed"})
    manager.add_coupon({"code": "TENOFF", "discount": 10, "type": "percent"})
    manager.add_coupon({
        "code": "EXPIRED",
        "discount": 5,
        "type": "fixed",
        "expires_at": NOW - timedelta(days=1),
    })
    manager.add_coupon({"code": "ONCE", "discount": 1, "type": "fixed", "max_uses": 1})
    manager.add_coupon({"code": "VIP", "discount": 20, "type": "percent", "user_id": 42})
    return manager


@pytest.fixture
def items():
    return [{"price": 100, "quantity": 2}]


@pytest.fixture
def cart(items, coupons):
    return Cart(
        Settings(global_discount=10, global_tax_rate=5),
        condition_manager=ConditionManager(),
        coupon_manager=coupons,
    ).set_items(items)


@pytest.fixture
def settings():
    return Settings(admin_api_key=ADMIN_KEY, global_tax_rate=0)


@pytest.fixture
def client(settings):
    """Fresh app per test, so coupons and sessions never leak between tests."""
    return TestClient(create_app(settings))


@pytest.fixture
def admin_headers():
    return {"x-api-key": ADMIN_KEY}
