from decimal import Decimal
from typing import Iterable

from .aggregator import approved_returns
from .models import Order, OrderItem, ReturnRequest
from .recognition import recognized_orders
from .returns import ZERO


def seller_items(order: Order, seller_id: str) -> list[OrderItem]:
    return [item for item in order.items if item.seller_id == seller_id]


def discount_share(order: Order, value: Decimal) -> Decimal:
    """Portion of the order's coupon discount attributable to `value`."""
    if not order.coupon_discount or order.subtotal <= 0:
        return ZERO
    return order.coupon_discount * (value / order.subtotal)


def seller_order_total(order: Order, seller_id: str) -> Decimal:
    subtotal = sum((item.line_total for item in seller_items(order, seller_id)), ZERO)
    return subtotal - discount_share(order, subtotal)


def seller_net_revenue(
    seller_id: str,
    orders: Iterable[Order],
    returns: Iterable[ReturnRequest],
) -> Decimal:
    """Net revenue owed to a third-party seller.

    Gross is the seller's share of every recognizable order net of its
    coupon share. Approved returns of the seller's items are deducted only
    when the order itself was recognized.
    """
    recognized = {
        order.id: order
        for order in recognized_orders(orders)
        if seller_items(order, seller_id)
    }
    gross = sum((seller_order_total(order, seller_id) for order in recognized.values()), ZERO)

    deductions = ZERO
    for request in approved_returns(returns):
        order = recognized.get(request.order_id)
        if order is None:
            continue
        item = order.find_item(request.product_id)
        if item is None or item.seller_id != seller_id:
            continue
        deductions += item.line_total - discount_share(order, item.line_total)

    return gross - deductions
