# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List
from decimal import Decimal
from datetime import datetime

from storefront.domain.enums import OrderStatus, PaymentStatus, VoucherDiscountType


class Schema(BaseModel):
    """Base schema: camelCase on the wire, snake_case accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


# carts

class CreateCartIn(Schema):
    user_id: int = Field(..., gt=0)


class ItemIn(Schema):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class CartItemOut(Schema):
    product_id: int
    quantity: int
    price: Decimal


class CartOut(Schema):
    cart_id: int
    user_id: int
    status: str
    items: List[CartItemOut]
    total: Decimal


# checkout / orders

class CheckoutIn(Schema):
    """POST /checkout body."""

    user_id: int = Field(..., gt=0)
    cart_id: int = Field(..., gt=0)
    payment_method_id: int = Field(..., gt=0)
    total_amount: Decimal = Field(..., ge=0, description="Cart subtotal as computed by the client")
    voucher_code: str | None = Field(None, max_length=50)
    final_amount: Decimal | None = Field(None, ge=0, description="Amount after voucher as computed by the client")
    shipping_address: str | None = None
    notes: str | None = None


class OrderOut(Schema):
    id: int
    user_id: int
    status: str
    payment_method: str
    payment_status: str
    total_amount: Decimal
    voucher_discount: Decimal
    shipping_address: str | None = None
    notes: str | None = None
    created_at: datetime


class PaymentOut(Schema):
    id: int
    order_id: int
    payment_method_id: int
    status: str
    amount: Decimal
    currency: str
    transaction_id: str | None = None
    paid_at: datetime | None = None


class OrderDetailOut(Schema):
    product_id: int
    product_name: str | None = None
    quantity: int
    price: Decimal
    total: Decimal


class OrderSummaryOut(Schema):
    order: OrderOut
    payment: PaymentOut
    order_details: List[OrderDetailOut]
    total_items: int
    total_amount: Decimal
    voucher_discount: Decimal


class OrderWithPaymentOut(Schema):
    order: OrderOut
    payment: PaymentOut | None = None
    order_details: List[OrderDetailOut]


class CancelOrderIn(Schema):
    reason: str | None = Field(None, max_length=500)


class OrderStatusIn(Schema):
    status: OrderStatus
    note: str | None = Field(None, max_length=500)


class TrackingOut(Schema):
    status: str
    note: str | None = None
    created_at: datetime


# payments

class PaymentStatusIn(Schema):
    status: PaymentStatus
    transaction_id: str | None = None
    gateway_data: Dict[str, Any] | None = None


# vouchers

class ApplyVoucherIn(Schema):
    code: str = Field(..., min_length=1, max_length=50)
    order_amount: Decimal = Field(..., ge=0)


class ValidateVoucherIn(ApplyVoucherIn):
    user_id: int = Field(..., gt=0)


class VoucherOut(Schema):
    id: int
    code: str
    description: str | None = None
    discount_type: str
    discount_value: Decimal | None = None
    min_order_value: Decimal
    max_discount: Decimal | None = None
    start_date: datetime
    end_date: datetime
    usage_limit: int | None = None
    used_count: int
    per_user_limit: int | None = None
    combinable: bool
    is_active: bool


class VoucherResultOut(Schema):
    valid: bool
    discount: Decimal
    final_amount: Decimal
    voucher: VoucherOut | None = None


class VoucherCreateIn(Schema):
    code: str = Field(..., min_length=1, max_length=50)
    description: str | None = Field(None, max_length=255)
    discount_type: VoucherDiscountType
    discount_value: Decimal | None = Field(None, ge=0)
    min_order_value: Decimal = Field(Decimal("0"), ge=0)
    max_discount: Decimal | None = Field(None, ge=0)
    start_date: datetime
    end_date: datetime
    usage_limit: int | None = Field(None, ge=0)
    per_user_limit: int | None = Field(None, ge=0)
    combinable: bool = False
    is_active: bool = True


class VoucherUpdateIn(Schema):
    code: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, max_length=255)
    discount_type: VoucherDiscountType | None = None
    discount_value: Decimal | None = Field(None, ge=0)
    min_order_value: Decimal | None = Field(None, ge=0)
    max_discount: Decimal | None = Field(None, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = Field(None, ge=0)
    per_user_limit: int | None = Field(None, ge=0)
    combinable: bool | None = None
    is_active: bool | None = None


class ErrorOut(Schema):
    code: str
    message: str
    details: Dict[str, Any] = {}
