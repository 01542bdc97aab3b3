"""
Unit Tests for return reversals

Tests cover:
1. Full return of a single-item order
2. Partial proration across several items
3. Margin reversal on platform-sold items only
4. Zero-subtotal guard
"""

import pytest
from decimal import Decimal

from settlement.returns import compute_reversal, proration_ratio
from settlement.tests.helpers import PLATFORM, SELLER, item


class TestProration:
    """Tax and fee reversals follow the returned line's share of the subtotal."""

    def test_full_single_item_return_reverses_everything(self, make_order):
        order = make_order()
        returned = order.items[0]

        assert proration_ratio(order, returned) == Decimal("1")

        reversal = compute_reversal(order, returned, Decimal("700"), PLATFORM)
        assert reversal.tax_delta == Decimal("-180")
        assert reversal.fee_delta == Decimal("-20")
        assert reversal.margin_delta == Decimal("-300")

    def test_partial_return_is_prorated(self, make_order):
        order = make_order(
            subtotal="1000", tax="100", platform_fee="40",
            items=[item("prod-a", SELLER, "250", 2), item("prod-b", SELLER, "500", 1)],
        )
        reversal = compute_reversal(order, order.items[1], None, PLATFORM)

        assert reversal.tax_delta == Decimal("-50")
        assert reversal.fee_delta == Decimal("-20")
        assert reversal.margin_delta == Decimal("0")


class TestMarginReversal:
    """Margin is reversed exactly on the returned units, never prorated."""

    def test_margin_not_scaled_by_ratio(self, make_order):
        order = make_order(
            subtotal="2000", tax="200", platform_fee="20",
            items=[item("prod-a", PLATFORM, "300", 2), item("prod-b", SELLER, "1400", 1)],
        )
        reversal = compute_reversal(order, order.items[0], Decimal("200"), PLATFORM)

        assert reversal.tax_delta == Decimal("-60")
        assert reversal.margin_delta == Decimal("-200")

    def test_third_party_item_has_no_margin(self, make_order):
        order = make_order(items=[item("prod-a", SELLER, "1000", 1)])
        reversal = compute_reversal(order, order.items[0], Decimal("700"), PLATFORM)
        assert reversal.margin_delta == Decimal("0")

    def test_missing_cost_has_no_margin(self, make_order):
        order = make_order()
        reversal = compute_reversal(order, order.items[0], None, PLATFORM)
        assert reversal.margin_delta == Decimal("0")
        assert reversal.tax_delta == Decimal("-180")


class TestZeroSubtotal:
    """Orders with nothing in the subtotal produce no reversal."""

    def test_zero_subtotal_reversal_is_zero(self, make_order):
        order = make_order(subtotal="0", tax="18", platform_fee="5", items=[item("prod-a", PLATFORM, "0", 1)])
        reversal = compute_reversal(order, order.items[0], Decimal("700"), PLATFORM)

        assert reversal.tax_delta == 0
        assert reversal.fee_delta == 0
        assert reversal.margin_delta == 0

    def test_zero_subtotal_ratio_is_zero(self, make_order):
        order = make_order(subtotal="0")
        assert proration_ratio(order, order.items[0]) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
