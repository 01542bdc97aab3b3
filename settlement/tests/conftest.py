from datetime import datetime, timezone
from decimal import Decimal

import pytest

from settlement.config import Settings
from settlement.models import Order
from settlement.storage import InMemoryStorage
from settlement.tests.helpers import PLATFORM, item


@pytest.fixture
def settings():
    return Settings(platform_seller_id=PLATFORM, seed_demo_data=False, _env_file=None)


@pytest.fixture
def storage():
    return InMemoryStorage(seed=False, platform_seller_id=PLATFORM)


@pytest.fixture
def make_order():
    def _make(
        order_id="ord-1",
        status="Delivered",
        payment_method="Prepaid",
        subtotal="1000",
        tax="180",
        platform_fee="20",
        shipping_fee="50",
        coupon_discount="0",
        items=None,
        ordered_at=None,
    ):
        if items is None:
            items = [item("prod-a", PLATFORM, "1000", 1)]
        return Order(
            id=order_id,
            ordered_at=ordered_at or datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc),
            status=status,
            payment_method=payment_method,
            subtotal=Decimal(subtotal),
            tax=Decimal(tax),
            platform_fee=Decimal(platform_fee),
            shipping_fee=Decimal(shipping_fee),
            coupon_discount=Decimal(coupon_discount),
            items=items,
        )
    return _make