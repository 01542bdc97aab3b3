from decimal import Decimal

from settlement.models import OrderItem, Product, ReturnRequest


PLATFORM = "platform"
SELLER = "seller-anand"


def item(product_id, seller_id, unit_price, quantity):
    return OrderItem(product_id=product_id, seller_id=seller_id, unit_price=Decimal(unit_price), quantity=quantity)


def approved(return_id, order_id, product_id):
    return ReturnRequest(id=return_id, order_id=order_id, product_id=product_id, status="Approved")


def product(product_id, name=None, seller_id=PLATFORM, price="100", cost_price=None):
    return Product(
        id=product_id,
        name=name or product_id,
        seller_id=seller_id,
        price=Decimal(price),
        cost_price=Decimal(cost_price) if cost_price is not None else None,
    )
