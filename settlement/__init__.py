"""
Revenue Recognition & Settlement Ledger

This module provides:
- Recognition timing per payment method (cash on delivery vs prepaid)
- Prorated tax/fee reversals and exact margin reversals for approved returns
- A single RevenueSnapshot shared by the analytics and revenue dashboards
- Day-bucketed sales series and best-seller ranking
- Serialized platform withdrawals and seller payout requests
"""

from .models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    ReturnRequest,
    ReturnStatus,
    RevenueSnapshot,
    WithdrawalRecord,
    WithdrawalResult,
    RejectionReason,
)
from .recognition import is_recognizable
from .returns import compute_reversal
from .aggregator import build_snapshot
from .analytics import bucket_sales_by_day, top_products
from .service import RevenueService, WithdrawalService, PayoutService

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "ReturnRequest",
    "ReturnStatus",
    "RevenueSnapshot",
    "WithdrawalRecord",
    "WithdrawalResult",
    "RejectionReason",
    "is_recognizable",
    "compute_reversal",
    "build_snapshot",
    "bucket_sales_by_day",
    "top_products",
    "RevenueService",
    "WithdrawalService",
    "PayoutService",
]
