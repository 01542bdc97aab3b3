import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Union

from .models import Order, OrderStatus, Product, SalesBucket, TopProduct

logger = logging.getLogger(__name__)


def _order_day(ordered_at: datetime) -> date:
    if ordered_at.tzinfo is not None:
        ordered_at = ordered_at.astimezone(timezone.utc)
    return ordered_at.date()


def bucket_sales_by_day(
    delivered_orders: Iterable[Order],
    days: int = 7,
    today: Optional[date] = None,
) -> list[SalesBucket]:
    """Delivered sales per calendar day, oldest first.

    Every day in the window gets a bucket even when nothing sold.
    """
    today = today or datetime.now(timezone.utc).date()
    totals: dict[date, Decimal] = {
        today - timedelta(days=offset): Decimal("0")
        for offset in range(days - 1, -1, -1)
    }

    for order in delivered_orders:
        if order.status != OrderStatus.DELIVERED:
            continue
        day = _order_day(order.ordered_at)
        if day in totals:
            totals[day] += order.total_price

    return [
        SalesBucket(day=day, label=day.strftime("%a"), total=total)
        for day, total in totals.items()
    ]


def top_products(
    delivered_orders: Iterable[Order],
    product_catalog: Union[Mapping[str, Product], Iterable[Product]],
    limit: int = 5,
) -> list[TopProduct]:
    if not isinstance(product_catalog, Mapping):
        product_catalog = {product.id: product for product in product_catalog}

    units: dict[str, int] = {}
    for order in delivered_orders:
        if order.status != OrderStatus.DELIVERED:
            continue
        for item in order.items:
            units[item.product_id] = units.get(item.product_id, 0) + item.quantity

    ranked = []
    for product_id, sold in units.items():
        product = product_catalog.get(product_id)
        if product is None:
            logger.warning("Data gap: product %s sold but missing from catalog", product_id)
            continue
        ranked.append(TopProduct(product=product, units_sold=sold))

    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(ranked, key=lambda entry: entry.units_sold, reverse=True)
    return ranked[:limit]
