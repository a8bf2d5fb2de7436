# storefront/domain/errors.py
"""
Domain errors raised by the services.

Every error carries a stable machine-readable ``code`` and the HTTP status the
API layer answers with. The routers never build error payloads themselves; the
handler registered in ``storefront.main`` renders any ``StorefrontError``.
"""
from typing import Any, Dict


class StorefrontError(Exception):
    code = "STOREFRONT_ERROR"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class NotFound(StorefrontError):
    code = "NOT_FOUND"
    status_code = 404


class Forbidden(StorefrontError):
    code = "FORBIDDEN"
    status_code = 403


class EmptyCart(StorefrontError):
    code = "EMPTY_CART"


class InsufficientStock(StorefrontError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, requested: int, available: int, product_name: str | None = None):
        label = product_name or f"#{product_id}"
        super().__init__(
            f"Insufficient stock for product {label}. Available: {available}, Requested: {requested}",
            product_id=product_id,
            requested=requested,
            available=available,
        )


class AmountMismatch(StorefrontError):
    code = "AMOUNT_MISMATCH"


class PaymentMethodInactive(StorefrontError):
    code = "PAYMENT_METHOD_INACTIVE"


class PaymentAlreadyExists(StorefrontError):
    code = "PAYMENT_ALREADY_EXISTS"


class InvalidTransition(StorefrontError):
    code = "INVALID_TRANSITION"


class InvalidVoucher(StorefrontError):
    code = "INVALID_VOUCHER"


class VoucherCodeExists(StorefrontError):
    code = "VOUCHER_CODE_EXISTS"


class VoucherInUse(StorefrontError):
    code = "VOUCHER_IN_USE"


class ConcurrencyConflict(StorefrontError):
    """A concurrent request changed the same rows first. Safe to retry as a whole."""

    code = "CONCURRENCY_CONFLICT"
    status_code = 409


class VoucherValidationFailed(StorefrontError):
    code = "VOUCHER_VALIDATION_FAILED"
    reason = "VOUCHER_INVALID"

    def __init__(self, message: str, **details: Any):
        super().__init__(message, reason=self.reason, **details)


class VoucherInactive(VoucherValidationFailed):
    reason = "VOUCHER_INACTIVE"


class VoucherExpired(VoucherValidationFailed):
    reason = "VOUCHER_EXPIRED"


class VoucherNotYetActive(VoucherValidationFailed):
    reason = "VOUCHER_NOT_YET_ACTIVE"


class VoucherExhausted(VoucherValidationFailed):
    reason = "VOUCHER_EXHAUSTED"


class PerUserLimitReached(VoucherValidationFailed):
    reason = "PER_USER_LIMIT_REACHED"


class MinimumOrderNotMet(VoucherValidationFailed):
    reason = "MINIMUM_ORDER_NOT_MET"


class InvalidQuantity(StorefrontError):
    code = "INVALID_QUANTITY"
