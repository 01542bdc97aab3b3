"""Ledger aggregation: orders, returns and costs folded into one snapshot.

Both admin dashboards read the same RevenueSnapshot. The pass holds no state
between calls, so recomputing on every page load is the refresh mechanism.
"""

import logging
from decimal import Decimal
from typing import Iterable

from .models import (
    Order,
    OrderContribution,
    ReturnRequest,
    ReturnStatus,
    RevenueSnapshot,
)
from .recognition import recognized_orders
from .returns import ZERO, compute_reversal, item_margin
from .storage import ProductCostLookup

logger = logging.getLogger(__name__)


def order_margin(order: Order, cost_lookup: ProductCostLookup, platform_seller_id: str) -> Decimal:
    return sum(
        (item_margin(item, cost_lookup.cost_of(item.product_id), platform_seller_id) for item in order.items),
        ZERO,
    )


def order_contribution(order: Order, cost_lookup: ProductCostLookup, platform_seller_id: str) -> OrderContribution:
    return OrderContribution(
        order_id=order.id,
        ordered_at=order.ordered_at,
        tax=order.tax,
        platform_fee=order.platform_fee,
        shipping_fee=order.shipping_fee,
        platform_margin=order_margin(order, cost_lookup, platform_seller_id),
    )


def approved_returns(returns: Iterable[ReturnRequest]) -> list[ReturnRequest]:
    """Approved returns, each return id kept once in first-seen order."""
    seen: dict[str, ReturnRequest] = {}
    for request in returns:
        if request.status == ReturnStatus.APPROVED and request.id not in seen:
            seen[request.id] = request
    return list(seen.values())


def build_snapshot(
    orders: Iterable[Order],
    returns: Iterable[ReturnRequest],
    cost_lookup: ProductCostLookup,
    platform_seller_id: str = "platform",
) -> RevenueSnapshot:
    orders = list(orders)
    orders_by_id = {order.id: order for order in orders}

    contributions = [
        order_contribution(order, cost_lookup, platform_seller_id)
        for order in recognized_orders(orders)
    ]

    tax_total = sum((c.tax for c in contributions), ZERO)
    fee_total = sum((c.platform_fee for c in contributions), ZERO)
    shipping_total = sum((c.shipping_fee for c in contributions), ZERO)
    margin_total = sum((c.platform_margin for c in contributions), ZERO)

    # Returns are matched against every order, not only recognized ones
    for request in approved_returns(returns):
        order = orders_by_id.get(request.order_id)
        if order is None:
            logger.warning("Data gap: return %s references missing order %s", request.id, request.order_id)
            continue
        item = order.find_item(request.product_id)
        if item is None:
            logger.warning(
                "Data gap: return %s references product %s not on order %s",
                request.id, request.product_id, order.id,
            )
            continue

        reversal = compute_reversal(order, item, cost_lookup.cost_of(item.product_id), platform_seller_id)
        tax_total += reversal.tax_delta
        fee_total += reversal.fee_delta
        margin_total += reversal.margin_delta

    return RevenueSnapshot(
        total_revenue=tax_total + fee_total + shipping_total + margin_total,
        tax_total=tax_total,
        platform_fee_total=fee_total,
        shipping_fee_total=shipping_total,
        platform_margin_total=margin_total,
        contributions=contributions,
    )
