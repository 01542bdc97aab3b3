import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
from uuid import uuid4

from .aggregator import build_snapshot
from .analytics import bucket_sales_by_day, top_products
from .config import Settings, get_settings
from .errors import (
    InvalidStateTransitionError,
    PayoutNotFoundError,
    SettlementServiceError,
    StoreUnavailableError,
)
from .models import (
    AnalyticsOverview,
    OrderContribution,
    OrderStatus,
    PayoutResult,
    PayoutStatus,
    RejectionReason,
    RevenueSnapshot,
    SalesBucket,
    SellerBalance,
    SellerPayout,
    TopProduct,
    WithdrawalHistoryResponse,
    WithdrawalRecord,
    WithdrawalResult,
    WithdrawalStatus,
)
from .seller import seller_net_revenue
from .storage import InMemoryStorage, PayoutStore, RevenueStore, WithdrawalLedgerStore

logger = logging.getLogger(__name__)

__all__ = [
    "SettlementServiceError",
    "StoreUnavailableError",
    "PayoutNotFoundError",
    "InvalidStateTransitionError",
    "RevenueService",
    "WithdrawalService",
    "PayoutService",
    "parse_amount",
    "evaluate_withdrawal",
]


def parse_amount(value) -> Optional[Decimal]:
    """Finite Decimal for `value`, or None when it is not a usable number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not amount.is_finite():
        return None
    return amount


def evaluate_withdrawal(
    amount,
    snapshot: RevenueSnapshot,
    prior_withdrawals: Iterable[WithdrawalRecord],
) -> tuple[Optional[RejectionReason], Decimal]:
    """Check a withdrawal against the balance left after prior withdrawals.

    Returns the rejection reason (None when acceptable) and the available
    balance the decision was made against.
    """
    withdrawn = sum((w.amount for w in prior_withdrawals), Decimal("0"))
    available = snapshot.total_revenue - withdrawn
    return _check_amount(parse_amount(amount), available), available


def _check_amount(amount: Optional[Decimal], available: Decimal) -> Optional[RejectionReason]:
    if amount is None or amount <= 0:
        return RejectionReason.INVALID_AMOUNT
    if amount > available:
        return RejectionReason.INSUFFICIENT_BALANCE
    return None


def _reference(prefix: str, now: datetime) -> str:
    return f"{prefix}_{int(now.timestamp() * 1000)}_{uuid4().hex[:8].upper()}"


REJECTION_MESSAGES = {
    RejectionReason.INVALID_AMOUNT: "Please enter a valid amount.",
    RejectionReason.INSUFFICIENT_BALANCE: "Withdrawal amount cannot exceed available balance.",
}


def _read(fetch, *args, **kwargs):
    try:
        return fetch(*args, **kwargs)
    except StoreUnavailableError:
        logger.error("Store unavailable while calling %s", getattr(fetch, "__name__", fetch))
        raise


class RevenueService:
    """Single source of the platform revenue figures shown on the dashboards."""

    def __init__(self, storage: Optional[RevenueStore] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.storage = storage or InMemoryStorage(
            seed=self.settings.seed_demo_data,
            platform_seller_id=self.settings.platform_seller_id,
        )

    def get_snapshot(self) -> RevenueSnapshot:
        orders = _read(self.storage.list_orders)
        returns = _read(self.storage.list_returns)
        return build_snapshot(orders, returns, self.storage, self.settings.platform_seller_id)

    def recent_events(self, limit: Optional[int] = None) -> list[OrderContribution]:
        if limit is None:
            limit = self.settings.recent_events_limit
        return self.get_snapshot().recent_contributions(limit)

    def sales_by_day(self, days: Optional[int] = None) -> list[SalesBucket]:
        if days is None:
            days = self.settings.sales_window_days
        delivered = _read(self.storage.list_orders, OrderStatus.DELIVERED)
        return bucket_sales_by_day(delivered, days)

    def top_products(self, limit: Optional[int] = None) -> list[TopProduct]:
        if limit is None:
            limit = self.settings.top_products_limit
        delivered = _read(self.storage.list_orders, OrderStatus.DELIVERED)
        catalog = _read(self.storage.list_products)
        return top_products(delivered, catalog, limit)

    def analytics_overview(self) -> AnalyticsOverview:
        orders = _read(self.storage.list_orders)
        returns = _read(self.storage.list_returns)
        catalog = _read(self.storage.list_products)
        snapshot = build_snapshot(orders, returns, self.storage, self.settings.platform_seller_id)
        delivered = [o for o in orders if o.status == OrderStatus.DELIVERED]

        return AnalyticsOverview(
            total_revenue=snapshot.total_revenue,
            total_orders=len(orders),
            total_products=len(catalog),
            sales_by_day=bucket_sales_by_day(delivered, self.settings.sales_window_days),
            top_products=top_products(delivered, catalog, self.settings.top_products_limit),
        )


class WithdrawalService:
    def __init__(self, storage: Optional[WithdrawalLedgerStore] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.storage = storage or InMemoryStorage()

    def withdraw(self, amount, snapshot: RevenueSnapshot) -> WithdrawalResult:
        """Accept or reject one withdrawal attempt.

        The balance check and the append run inside one store transaction, so
        concurrent attempts cannot both pass against the same balance.
        """
        with self.storage.transaction():
            prior = _read(self.storage.list_withdrawals)
            reason, available = evaluate_withdrawal(amount, snapshot, prior)

            if reason is not None:
                logger.info("Withdrawal of %s rejected: %s (available %s)", amount, reason.value, available)
                return WithdrawalResult(
                    status=WithdrawalStatus.REJECTED,
                    reason=reason,
                    available_balance=available,
                    message=REJECTION_MESSAGES[reason],
                )

            now = datetime.now(timezone.utc)
            value = parse_amount(amount)
            record = WithdrawalRecord(
                id=str(uuid4()),
                created_at=now,
                amount=value,
                transaction_id=_reference(self.settings.withdrawal_reference_prefix, now),
            )
            _read(self.storage.append_withdrawal, record)

        logger.info("Withdrawal %s accepted for %s", record.transaction_id, value)
        return WithdrawalResult(
            status=WithdrawalStatus.ACCEPTED,
            record=record,
            available_balance=available - value,
            message=f"Successfully withdrew {value:.2f}.",
        )

    def get_history(self, snapshot: RevenueSnapshot) -> WithdrawalHistoryResponse:
        withdrawals = _read(self.storage.list_withdrawals)
        total = sum((w.amount for w in withdrawals), Decimal("0"))
        return WithdrawalHistoryResponse(
            withdrawals=withdrawals,
            total_withdrawn=total,
            available_balance=snapshot.total_revenue - total,
        )


class PayoutService:
    """Payout requests for third-party sellers: Processing until completed."""

    def __init__(self, storage: Optional[PayoutStore] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.storage = storage or InMemoryStorage()

    def get_net_revenue(self, seller_id: str) -> Decimal:
        orders = _read(self.storage.list_orders)
        returns = _read(self.storage.list_returns)
        return seller_net_revenue(seller_id, orders, returns)

    def get_balance(self, seller_id: str) -> SellerBalance:
        net_revenue = self.get_net_revenue(seller_id)
        payouts = _read(self.storage.list_payouts, seller_id)
        completed = sum((p.amount for p in payouts if p.status == PayoutStatus.COMPLETED), Decimal("0"))
        pending = sum((p.amount for p in payouts if p.status == PayoutStatus.PROCESSING), Decimal("0"))

        return SellerBalance(
            seller_id=seller_id,
            net_revenue=net_revenue,
            completed_payouts=completed,
            pending_payouts=pending,
            available_balance=net_revenue - completed - pending,
        )

    def list_payouts(self, seller_id: str) -> list[SellerPayout]:
        return _read(self.storage.list_payouts, seller_id)

    def request_payout(self, seller_id: str, amount) -> PayoutResult:
        with self.storage.transaction():
            balance = self.get_balance(seller_id)
            value = parse_amount(amount)
            reason = _check_amount(value, balance.available_balance)

            if reason is not None:
                logger.info("Payout request from %s rejected: %s", seller_id, reason.value)
                return PayoutResult(
                    status=WithdrawalStatus.REJECTED,
                    reason=reason,
                    available_balance=balance.available_balance,
                    message=REJECTION_MESSAGES[reason],
                )

            payout = SellerPayout(
                id=str(uuid4()),
                seller_id=seller_id,
                amount=value,
                status=PayoutStatus.PROCESSING,
                requested_at=datetime.now(timezone.utc),
            )
            _read(self.storage.save_payout, payout)

        logger.info("Payout %s requested by %s for %s", payout.id, seller_id, value)
        return PayoutResult(
            status=WithdrawalStatus.ACCEPTED,
            payout=payout,
            available_balance=balance.available_balance - value,
            message="Payout request submitted successfully!",
        )

    def complete_payout(self, payout_id: str) -> SellerPayout:
        with self.storage.transaction():
            payout = _read(self.storage.get_payout, payout_id)
            if payout is None:
                raise PayoutNotFoundError(f"Payout {payout_id} not found")
            if not payout.can_complete():
                raise InvalidStateTransitionError(f"Cannot complete payout in {payout.status.value} state")

            now = datetime.now(timezone.utc)
            payout = payout.model_copy(update={
                "status": PayoutStatus.COMPLETED,
                "completed_at": now,
                "transaction_id": _reference(self.settings.payout_reference_prefix, now),
            })
            _read(self.storage.save_payout, payout)

        logger.info("Payout %s completed", payout_id)
        return payout
