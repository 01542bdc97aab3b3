import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .models import (
    AnalyticsOverview,
    OrderContribution,
    PayoutRequest,
    PayoutResult,
    RevenueSnapshot,
    SalesBucket,
    SellerBalance,
    SellerPayout,
    TopProduct,
    WithdrawalHistoryResponse,
    WithdrawalRequest,
    WithdrawalResult,
)
from .service import (
    RevenueService, WithdrawalService, PayoutService,
    StoreUnavailableError, PayoutNotFoundError, InvalidStateTransitionError,
)
from .storage import InMemoryStorage

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title="Settlement Ledger API",
    description="Revenue recognition, return reversals and platform withdrawals",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

storage = InMemoryStorage(seed=settings.seed_demo_data, platform_seller_id=settings.platform_seller_id)
revenue_service = RevenueService(storage, settings)
withdrawal_service = WithdrawalService(storage, settings)
payout_service = PayoutService(storage, settings)


def _unavailable(e: StoreUnavailableError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e) or "Store unavailable")


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "settlement-ledger"}


@app.get("/revenue/snapshot", response_model=RevenueSnapshot, tags=["Revenue"])
def get_revenue_snapshot() -> RevenueSnapshot:
    try:
        return revenue_service.get_snapshot()
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.get("/revenue/recent", response_model=list[OrderContribution], tags=["Revenue"])
def get_recent_revenue_events(limit: Optional[int] = Query(default=None, ge=1, le=100)) -> list[OrderContribution]:
    try:
        return revenue_service.recent_events(limit)
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.get("/analytics/overview", response_model=AnalyticsOverview, tags=["Analytics"])
def get_analytics_overview() -> AnalyticsOverview:
    try:
        return revenue_service.analytics_overview()
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.get("/analytics/sales", response_model=list[SalesBucket], tags=["Analytics"])
def get_sales_by_day(days: Optional[int] = Query(default=None, ge=1, le=366)) -> list[SalesBucket]:
    try:
        return revenue_service.sales_by_day(days)
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.get("/analytics/top-products", response_model=list[TopProduct], tags=["Analytics"])
def get_top_products(limit: Optional[int] = Query(default=None, ge=1, le=100)) -> list[TopProduct]:
    try:
        return revenue_service.top_products(limit)
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.get("/withdrawals", response_model=WithdrawalHistoryResponse, tags=["Withdrawals"])
def get_withdrawals() -> WithdrawalHistoryResponse:
    try:
        return withdrawal_service.get_history(revenue_service.get_snapshot())
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.post("/withdrawals", response_model=WithdrawalResult, status_code=status.HTTP_201_CREATED, tags=["Withdrawals"])
def create_withdrawal(request: WithdrawalRequest) -> WithdrawalResult:
    try:
        result = withdrawal_service.withdraw(request.amount, revenue_service.get_snapshot())
    except StoreUnavailableError as e:
        raise _unavailable(e)
    if not result.accepted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"reason": result.reason.value, "message": result.message},
        )
    return result


@app.get("/sellers/{seller_id}/revenue", response_model=SellerBalance, tags=["Sellers"])
def get_seller_balance(seller_id: str) -> SellerBalance:
    try:
        return payout_service.get_balance(seller_id)
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.get("/sellers/{seller_id}/payouts", response_model=list[SellerPayout], tags=["Sellers"])
def get_seller_payouts(seller_id: str) -> list[SellerPayout]:
    try:
        return payout_service.list_payouts(seller_id)
    except StoreUnavailableError as e:
        raise _unavailable(e)


@app.post("/sellers/{seller_id}/payouts", response_model=PayoutResult, status_code=status.HTTP_201_CREATED, tags=["Sellers"])
def request_seller_payout(seller_id: str, request: PayoutRequest) -> PayoutResult:
    try:
        result = payout_service.request_payout(seller_id, request.amount)
    except StoreUnavailableError as e:
        raise _unavailable(e)
    if result.payout is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"reason": result.reason.value, "message": result.message},
        )
    return result


@app.post("/payouts/{payout_id}/complete", response_model=SellerPayout, tags=["Sellers"])
def complete_seller_payout(payout_id: str) -> SellerPayout:
    try:
        return payout_service.complete_payout(payout_id)
    except PayoutNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Payout {payout_id} not found")
    except InvalidStateTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreUnavailableError as e:
        raise _unavailable(e)
