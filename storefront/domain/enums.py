# storefront/domain/enums.py
from enum import Enum


class OrderStatus(str, Enum):
    NEW = "NEW"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    SHIPPING = "SHIPPING"
    DELIVERED = "DELIVERED"
    CANCELED = "CANCELED"
    CANCEL_REQUEST = "CANCEL_REQUEST"


# values written by the old pending/paid/... status column
LEGACY_ORDER_STATUS = {
    "pending": OrderStatus.NEW,
    "paid": OrderStatus.CONFIRMED,
    "shipped": OrderStatus.SHIPPING,
    "completed": OrderStatus.DELIVERED,
    "cancelled": OrderStatus.CANCELED,
}


def parse_order_status(value: str) -> OrderStatus:
    if value in LEGACY_ORDER_STATUS:
        return LEGACY_ORDER_STATUS[value]
    return OrderStatus(value)


class OrderPaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethodName(str, Enum):
    COD = "COD"
    MOMO = "MOMO"
    ZALOPAY = "ZALOPAY"
    VNPAY = "VNPAY"


class VoucherDiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"
    FREESHIP = "FREESHIP"


class CartStatus(str, Enum):
    ACTIVE = "ACTIVE"
