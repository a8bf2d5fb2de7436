# storefront/services/voucher_engine.py
from datetime import datetime, timezone
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.voucher import VoucherModel, OrderVoucherModel
from storefront.domain.enums import VoucherDiscountType
from storefront.domain.errors import (
    ConcurrencyConflict,
    MinimumOrderNotMet,
    NotFound,
    PerUserLimitReached,
    VoucherExhausted,
    VoucherExpired,
    VoucherInactive,
    VoucherNotYetActive,
)
from storefront.repos.voucher_repo import VoucherRepo
from storefront.services.presenters import voucher_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")


def normalize_code(code: str) -> str:
    return code.strip().upper()


def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes, everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _floor(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_FLOOR)


def calculate_discount(voucher: VoucherModel, order_amount: Decimal) -> Decimal:
    """
    Discount a voucher grants on order_amount, floored to a whole currency unit.

    FREESHIP gives nothing against the subtotal; shipping fees are priced
    outside this engine.
    """
    order_amount = Decimal(order_amount)
    value = Decimal(voucher.discount_value or 0)

    if voucher.discount_type == VoucherDiscountType.PERCENTAGE.value:
        raw = value / Decimal(100) * order_amount
        if voucher.max_discount is not None:
            raw = min(raw, Decimal(voucher.max_discount))
        return max(ZERO, _floor(raw))

    if voucher.discount_type == VoucherDiscountType.FIXED.value:
        return max(ZERO, _floor(min(order_amount, value)))

    return ZERO


def final_amount(order_amount: Decimal, discount: Decimal) -> Decimal:
    return max(ZERO, Decimal(order_amount) - discount)


class VoucherEngine:
    def __init__(self, db: Session):
        self.db = db
        self.repo = VoucherRepo(db)

    def _load(self, code: str) -> VoucherModel:
        normalized = normalize_code(code)
        voucher = self.repo.get_by_code(normalized)
        if not voucher:
            raise NotFound(f"Voucher {normalized} not found", code=normalized)
        return voucher

    def _assert_usable(
        self,
        voucher: VoucherModel,
        order_amount: Decimal,
        user_id: int | None,
        now: datetime,
    ) -> None:
        # first violated rule wins
        if not voucher.is_active or voucher.is_deleted:
            raise VoucherInactive(f"Voucher {voucher.code} is inactive")

        if now < as_utc(voucher.start_date):
            raise VoucherNotYetActive(f"Voucher {voucher.code} is not active yet")
        if now > as_utc(voucher.end_date):
            raise VoucherExpired(f"Voucher {voucher.code} has expired")

        if voucher.usage_limit is not None and voucher.used_count >= voucher.usage_limit:
            raise VoucherExhausted(f"Voucher {voucher.code} usage limit reached")

        if user_id is not None and voucher.per_user_limit is not None:
            usage = self.repo.get_usage(voucher.id, user_id)
            times_used = usage.times_used if usage else 0
            if times_used >= voucher.per_user_limit:
                raise PerUserLimitReached(
                    f"User {user_id} already used voucher {voucher.code} {times_used} time(s)",
                    times_used=times_used,
                    per_user_limit=voucher.per_user_limit,
                )

        if Decimal(order_amount) < Decimal(voucher.min_order_value or 0):
            raise MinimumOrderNotMet(
                f"Order does not meet minimum amount {voucher.min_order_value} for voucher {voucher.code}",
                min_order_value=str(voucher.min_order_value),
            )

    def _result(self, voucher: VoucherModel, order_amount: Decimal) -> Dict[str, Any]:
        discount = calculate_discount(voucher, order_amount)
        return {
            "valid": True,
            "discount": discount,
            "final_amount": final_amount(order_amount, discount),
            "voucher": voucher_to_dict(voucher),
            "voucher_id": voucher.id,
        }

    #query - read only, nothing is recorded
    def validate(
        self,
        code: str,
        user_id: int,
        order_amount: Decimal,
        now: datetime | None = None,
    ) -> Dict[str, Any]:
        voucher = self._load(code)
        self._assert_usable(voucher, order_amount, user_id, now or datetime.now(timezone.utc))
        return self._result(voucher, order_amount)

    def apply(self, code: str, order_amount: Decimal, now: datetime | None = None) -> Dict[str, Any]:
        """Preview without a user, so the per-user limit is not consulted."""
        voucher = self._load(code)
        self._assert_usable(voucher, order_amount, None, now or datetime.now(timezone.utc))
        return self._result(voucher, order_amount)

    #command
    def record_usage(self, voucher_id: int, user_id: int, order_id: int, discount_applied: Decimal) -> bool:
        """
        Counts one redemption of a voucher for an order.

        The (order, voucher) snapshot row is the idempotency key: a second
        call for the same order changes nothing and returns False. Must run
        in the same transaction that creates the order.
        """
        voucher = self.repo.get_voucher(voucher_id)
        if not voucher:
            raise NotFound(f"Voucher with ID {voucher_id} not found", voucher_id=voucher_id)

        if self.repo.get_order_voucher(order_id, voucher_id):
            logger.info(f"Voucher {voucher.code} usage for order {order_id} already recorded")
            return False

        try:
            self.repo.add_order_voucher(
                OrderVoucherModel(
                    order_id=order_id,
                    voucher_id=voucher.id,
                    code_snapshot=voucher.code,
                    discount_type_snapshot=voucher.discount_type,
                    discount_value_snapshot=voucher.discount_value,
                    discount_applied=discount_applied,
                )
            )
        except IntegrityError:
            raise ConcurrencyConflict(f"Voucher usage for order {order_id} is being recorded concurrently")

        if self.repo.increment_used_count(voucher.id) == 0:
            raise VoucherExhausted(f"Voucher {voucher.code} usage limit reached")

        usage = self.repo.get_usage(voucher.id, user_id)
        if not usage:
            try:
                usage = self.repo.create_usage(voucher.id, user_id)
            except IntegrityError:
                raise ConcurrencyConflict(f"Concurrent first redemption of voucher {voucher.code}")

        if self.repo.increment_times_used(usage.id, voucher.per_user_limit) == 0:
            raise PerUserLimitReached(
                f"User {user_id} reached the limit for voucher {voucher.code}",
                per_user_limit=voucher.per_user_limit,
            )

        logger.info(f"Voucher {voucher.code} used by user {user_id} on order {order_id} (discount {discount_applied})")
        return True
