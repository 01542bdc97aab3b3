from decimal import Decimal
from typing import Optional

from .models import Order, OrderItem, Reversal


ZERO = Decimal("0")


def proration_ratio(order: Order, returned_item: OrderItem) -> Decimal:
    if order.subtotal <= 0:
        return ZERO
    return returned_item.line_total / order.subtotal


def item_margin(item: OrderItem, cost: Optional[Decimal], platform_seller_id: str) -> Decimal:
    """Margin the platform earns on a line it sold itself, zero otherwise."""
    if item.seller_id != platform_seller_id or cost is None:
        return ZERO
    return (item.unit_price - cost) * item.quantity


def compute_reversal(
    order: Order,
    returned_item: OrderItem,
    cost: Optional[Decimal],
    platform_seller_id: str,
) -> Reversal:
    """Reversal an approved return causes against its originating order.

    Tax and platform fee are reversed in proportion to the returned line's
    share of the order subtotal. Margin is reversed exactly on the returned
    units. Shipping is never reversed.
    """
    if order.subtotal <= 0:
        return Reversal()

    ratio = proration_ratio(order, returned_item)
    margin = item_margin(returned_item, cost, platform_seller_id)
    return Reversal(
        tax_delta=-(order.tax * ratio),
        fee_delta=-(order.platform_fee * ratio),
        margin_delta=-margin if margin else ZERO,
    )
