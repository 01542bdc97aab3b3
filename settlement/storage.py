import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Protocol, runtime_checkable

from .models import (
    Order,
    OrderStatus,
    Product,
    ProductCostRecord,
    ReturnRequest,
    ReturnStatus,
    SellerPayout,
    WithdrawalRecord,
)


@runtime_checkable
class OrderFeed(Protocol):
    def list_orders(self, status: Optional[OrderStatus] = None) -> list[Order]: ...


@runtime_checkable
class ReturnFeed(Protocol):
    def list_returns(self, status: Optional[ReturnStatus] = None) -> list[ReturnRequest]: ...


@runtime_checkable
class ProductCostLookup(Protocol):
    def cost_of(self, product_id: str) -> Optional[Decimal]: ...


@runtime_checkable
class ProductCatalog(Protocol):
    def list_products(self) -> list[Product]: ...


@runtime_checkable
class WithdrawalLedgerStore(Protocol):
    def list_withdrawals(self) -> list[WithdrawalRecord]: ...

    def append_withdrawal(self, record: WithdrawalRecord) -> None: ...

    def transaction(self): ...


@runtime_checkable
class RevenueStore(OrderFeed, ReturnFeed, ProductCatalog, ProductCostLookup, Protocol):
    """Everything the revenue dashboards read."""


@runtime_checkable
class PayoutStore(OrderFeed, ReturnFeed, Protocol):
    def list_payouts(self, seller_id: Optional[str] = None) -> list[SellerPayout]: ...

    def get_payout(self, payout_id: str) -> Optional[SellerPayout]: ...

    def save_payout(self, payout: SellerPayout) -> None: ...

    def transaction(self): ...


class StaticCostLookup:
    """Cost lookup over a fixed set of cost records."""

    def __init__(self, records: Iterable[ProductCostRecord] = ()):
        self._costs: dict[str, Optional[Decimal]] = {r.product_id: r.cost_price for r in records}

    def cost_of(self, product_id: str) -> Optional[Decimal]:
        return self._costs.get(product_id)


class InMemoryStorage:
    def __init__(self, seed: bool = False, platform_seller_id: str = "platform"):
        self.orders: dict[str, dict] = {}
        self.returns: dict[str, dict] = {}
        self.products: dict[str, dict] = {}
        self.withdrawals: list[dict] = []
        self.payouts: dict[str, dict] = {}
        self.platform_seller_id = platform_seller_id
        self._lock = threading.RLock()
        if seed:
            self._seed_data()

    @contextmanager
    def transaction(self) -> Iterator["InMemoryStorage"]:
        with self._lock:
            yield self

    # Order feed

    def add_order(self, order: Order) -> None:
        with self._lock:
            self.orders[order.id] = order.model_dump()

    def list_orders(self, status: Optional[OrderStatus] = None) -> list[Order]:
        with self._lock:
            rows = list(self.orders.values())
        orders = [Order(**row) for row in rows]
        if status is not None:
            orders = [o for o in orders if o.status == status]
        return orders

    # Return feed

    def add_return(self, request: ReturnRequest) -> None:
        with self._lock:
            self.returns[request.id] = request.model_dump()

    def list_returns(self, status: Optional[ReturnStatus] = None) -> list[ReturnRequest]:
        with self._lock:
            rows = list(self.returns.values())
        returns = [ReturnRequest(**row) for row in rows]
        if status is not None:
            returns = [r for r in returns if r.status == status]
        return returns

    # Catalog and cost lookup

    def add_product(self, product: Product) -> None:
        with self._lock:
            self.products[product.id] = product.model_dump()

    def list_products(self) -> list[Product]:
        with self._lock:
            return [Product(**row) for row in self.products.values()]

    def cost_of(self, product_id: str) -> Optional[Decimal]:
        with self._lock:
            row = self.products.get(product_id)
        return row["cost_price"] if row else None

    # Withdrawal ledger

    def list_withdrawals(self) -> list[WithdrawalRecord]:
        with self._lock:
            rows = list(self.withdrawals)
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [WithdrawalRecord(**row) for row in rows]

    def append_withdrawal(self, record: WithdrawalRecord) -> None:
        with self._lock:
            self.withdrawals.append(record.model_dump())

    # Seller payouts

    def list_payouts(self, seller_id: Optional[str] = None) -> list[SellerPayout]:
        with self._lock:
            rows = list(self.payouts.values())
        if seller_id is not None:
            rows = [r for r in rows if r["seller_id"] == seller_id]
        rows.sort(key=lambda r: r["requested_at"], reverse=True)
        return [SellerPayout(**row) for row in rows]

    def get_payout(self, payout_id: str) -> Optional[SellerPayout]:
        with self._lock:
            row = self.payouts.get(payout_id)
        return SellerPayout(**row) if row else None

    def save_payout(self, payout: SellerPayout) -> None:
        with self._lock:
            self.payouts[payout.id] = payout.model_dump()

    def _seed_data(self):
        now = datetime.now(timezone.utc)
        platform = self.platform_seller_id

        self.add_product(Product(
            id="prod-kettle", name="Steel Kettle", seller_id=platform,
            price=Decimal("1000.00"), cost_price=Decimal("700.00"),
        ))
        self.add_product(Product(
            id="prod-saree", name="Cotton Saree", seller_id="seller-anand",
            price=Decimal("1500.00"),
        ))

        self.add_order(Order(
            id="ord-1001", ordered_at=now - timedelta(days=2),
            status=OrderStatus.DELIVERED, payment_method="Prepaid",
            subtotal=Decimal("1000.00"), tax=Decimal("180.00"),
            platform_fee=Decimal("20.00"), shipping_fee=Decimal("50.00"),
            items=[{"product_id": "prod-kettle", "seller_id": platform,
                    "unit_price": Decimal("1000.00"), "quantity": 1}],
        ))
        self.add_order(Order(
            id="ord-1002", ordered_at=now - timedelta(days=1),
            status=OrderStatus.SHIPPED, payment_method="CashOnDelivery",
            subtotal=Decimal("3000.00"), tax=Decimal("540.00"),
            platform_fee=Decimal("20.00"), shipping_fee=Decimal("0.00"),
            items=[{"product_id": "prod-saree", "seller_id": "seller-anand",
                    "unit_price": Decimal("1500.00"), "quantity": 2}],
        ))
