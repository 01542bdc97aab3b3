from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field, ConfigDict, computed_field, field_validator


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = "CashOnDelivery"
    PREPAID = "Prepaid"


class OrderStatus(str, Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class ReturnStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class WithdrawalStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class RejectionReason(str, Enum):
    INVALID_AMOUNT = "InvalidAmount"
    INSUFFICIENT_BALANCE = "InsufficientBalance"


class PayoutStatus(str, Enum):
    PROCESSING = "Processing"
    COMPLETED = "Completed"


# Storefront spellings seen on older orders
PAYMENT_METHOD_ALIASES = {
    "cashondelivery": PaymentMethod.CASH_ON_DELIVERY,
    "cash on delivery": PaymentMethod.CASH_ON_DELIVERY,
    "cod": PaymentMethod.CASH_ON_DELIVERY,
    "prepaid": PaymentMethod.PREPAID,
    "razorpay": PaymentMethod.PREPAID,
}


class OrderItem(BaseModel):
    product_id: str
    seller_id: str
    unit_price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Order(BaseModel):
    id: str
    ordered_at: datetime
    status: str
    payment_method: str
    subtotal: Decimal
    tax: Decimal = Decimal("0")
    platform_fee: Decimal = Decimal("0")
    shipping_fee: Decimal = Decimal("0")
    coupon_discount: Decimal = Decimal("0")
    items: list[OrderItem] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("payment_method", mode="before")
    @classmethod
    def normalize_payment_method(cls, value):
        if isinstance(value, PaymentMethod):
            return value.value
        method = PAYMENT_METHOD_ALIASES.get(str(value).strip().lower())
        return method.value if method else value

    @field_validator("ordered_at")
    @classmethod
    def ordered_at_utc(cls, value: datetime) -> datetime:
        # Feeds mix "Z"-suffixed and bare timestamps; bare ones are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return value.value if isinstance(value, Enum) else value

    @property
    def total_price(self) -> Decimal:
        return self.subtotal + self.tax + self.platform_fee + self.shipping_fee - self.coupon_discount

    def find_item(self, product_id: str) -> Optional[OrderItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


class ReturnRequest(BaseModel):
    id: str
    order_id: str
    product_id: str
    status: ReturnStatus = ReturnStatus.PENDING

    model_config = ConfigDict(from_attributes=True, frozen=True)


class ProductCostRecord(BaseModel):
    product_id: str
    cost_price: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class Product(BaseModel):
    id: str
    name: str
    seller_id: str
    price: Decimal
    cost_price: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class Reversal(BaseModel):
    tax_delta: Decimal = Decimal("0")
    fee_delta: Decimal = Decimal("0")
    margin_delta: Decimal = Decimal("0")


class OrderContribution(BaseModel):
    order_id: str
    ordered_at: datetime
    tax: Decimal
    platform_fee: Decimal
    shipping_fee: Decimal
    platform_margin: Decimal

    @computed_field
    @property
    def total(self) -> Decimal:
        return self.tax + self.platform_fee + self.shipping_fee + self.platform_margin


class RevenueSnapshot(BaseModel):
    total_revenue: Decimal
    tax_total: Decimal
    platform_fee_total: Decimal
    shipping_fee_total: Decimal
    platform_margin_total: Decimal
    contributions: list[OrderContribution] = Field(default_factory=list)

    def recent_contributions(self, limit: int = 10) -> list[OrderContribution]:
        ordered = sorted(self.contributions, key=lambda c: c.ordered_at, reverse=True)
        return ordered[:limit]


class WithdrawalRecord(BaseModel):
    id: str
    created_at: datetime
    amount: Decimal
    transaction_id: str

    model_config = ConfigDict(from_attributes=True, frozen=True)


class WithdrawalRequest(BaseModel):
    # Left unparsed so non-numeric input reaches the service as InvalidAmount
    amount: Union[Decimal, str, None] = Field(..., description="Amount to withdraw from the platform balance")

    model_config = ConfigDict(json_schema_extra={
        "example": {"amount": 600.00}
    })


class WithdrawalResult(BaseModel):
    status: WithdrawalStatus
    record: Optional[WithdrawalRecord] = None
    reason: Optional[RejectionReason] = None
    available_balance: Decimal
    message: str

    @property
    def accepted(self) -> bool:
        return self.status == WithdrawalStatus.ACCEPTED


class WithdrawalHistoryResponse(BaseModel):
    withdrawals: list[WithdrawalRecord]
    total_withdrawn: Decimal
    available_balance: Decimal


class SalesBucket(BaseModel):
    day: date
    label: str
    total: Decimal


class TopProduct(BaseModel):
    product: Product
    units_sold: int


class AnalyticsOverview(BaseModel):
    total_revenue: Decimal
    total_orders: int
    total_products: int
    sales_by_day: list[SalesBucket]
    top_products: list[TopProduct]


class SellerPayout(BaseModel):
    id: str
    seller_id: str
    amount: Decimal
    status: PayoutStatus
    requested_at: datetime
    completed_at: Optional[datetime] = None
    transaction_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    def can_complete(self) -> bool:
        return self.status == PayoutStatus.PROCESSING


class PayoutRequest(BaseModel):
    amount: Union[Decimal, str, None] = Field(..., description="Amount to pay out to the seller")


class PayoutResult(BaseModel):
    status: WithdrawalStatus
    payout: Optional[SellerPayout] = None
    reason: Optional[RejectionReason] = None
    available_balance: Decimal
    message: str


class SellerBalance(BaseModel):
    seller_id: str
    net_revenue: Decimal
    completed_payouts: Decimal
    pending_payouts: Decimal
    available_balance: Decimal
