"""Revenue recognition timing per payment method.

Cash on delivery is only earned once the courier confirms delivery. Prepaid
orders were captured at checkout, so they stay recognized until cancelled.
"""

from typing import Iterable

from .models import Order, OrderStatus, PaymentMethod


RECOGNIZABLE_STATUSES = {
    PaymentMethod.CASH_ON_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    PaymentMethod.PREPAID: frozenset({
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
    }),
}


def is_recognizable(order: Order) -> bool:
    try:
        method = PaymentMethod(order.payment_method)
        status = OrderStatus(order.status)
    except ValueError:
        return False
    return status in RECOGNIZABLE_STATUSES[method]


def recognized_orders(orders: Iterable[Order]) -> list[Order]:
    return [order for order in orders if is_recognizable(order)]
