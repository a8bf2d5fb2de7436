# storefront/services/voucher_service.py
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.voucher import VoucherModel
from storefront.data.unit_of_work import UnitOfWork
from storefront.domain.enums import VoucherDiscountType
from storefront.domain.errors import InvalidVoucher, NotFound, VoucherCodeExists, VoucherInUse
from storefront.repos.voucher_repo import VoucherRepo
from storefront.services.presenters import voucher_to_dict
from storefront.services.voucher_engine import as_utc, normalize_code
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_EDITABLE = (
    "description",
    "discount_type",
    "discount_value",
    "min_order_value",
    "max_discount",
    "start_date",
    "end_date",
    "usage_limit",
    "per_user_limit",
    "combinable",
    "is_active",
)

# NOT NULL columns an update may change but never clear
_REQUIRED = (
    "discount_type",
    "min_order_value",
    "start_date",
    "end_date",
    "combinable",
    "is_active",
)


def _check_rules(voucher: VoucherModel):
    if as_utc(voucher.end_date) < as_utc(voucher.start_date):
        raise InvalidVoucher("Voucher end date must not be before its start date")

    if voucher.discount_type != VoucherDiscountType.FREESHIP.value and voucher.discount_value is None:
        raise InvalidVoucher(f"{voucher.discount_type} voucher needs a discount value")

    if voucher.discount_type == VoucherDiscountType.PERCENTAGE.value and Decimal(voucher.discount_value) > 100:
        raise InvalidVoucher("Percentage discount cannot exceed 100")

    if voucher.usage_limit is not None and voucher.usage_limit < (voucher.used_count or 0):
        raise InvalidVoucher("Usage limit cannot be lower than the current usage count")


class VoucherService:
    """Back-office management of voucher rules."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VoucherRepo(db)

    def _get(self, voucher_id: int) -> VoucherModel:
        voucher = self.repo.get_voucher(voucher_id)
        if not voucher:
            raise NotFound("Voucher not found", voucher_id=voucher_id)
        return voucher

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        code = normalize_code(data["code"])

        with UnitOfWork(self.db):
            if self.repo.get_by_code(code):
                raise VoucherCodeExists("Voucher code already exists", code=code)

            voucher = VoucherModel(code=code, used_count=0, **{k: data.get(k) for k in _EDITABLE if k in data})
            if voucher.min_order_value is None:
                voucher.min_order_value = Decimal("0")
            if voucher.combinable is None:
                voucher.combinable = False
            if voucher.is_active is None:
                voucher.is_active = True

            _check_rules(voucher)
            self.repo.save(voucher)

        logger.info(f"Voucher {voucher.code} created")
        return voucher_to_dict(voucher)

    def list_vouchers(self) -> List[Dict[str, Any]]:
        return [voucher_to_dict(v) for v in self.repo.list_vouchers()]

    def update(self, voucher_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        cleared = [f for f in _REQUIRED if f in data and data[f] is None]
        if cleared:
            raise InvalidVoucher(f"Fields cannot be null: {', '.join(cleared)}", fields=cleared)

        with UnitOfWork(self.db):
            voucher = self._get(voucher_id)

            if data.get("code"):
                code = normalize_code(data["code"])
                other = self.repo.get_by_code(code)
                if other and other.id != voucher.id:
                    raise VoucherCodeExists("Voucher code already exists", code=code)
                voucher.code = code

            for field in _EDITABLE:
                if field in data:
                    setattr(voucher, field, data[field])

            _check_rules(voucher)
            self.repo.save(voucher)

        logger.info(f"Voucher {voucher.code} updated")
        return voucher_to_dict(voucher)

    def deactivate(self, voucher_id: int) -> None:
        with UnitOfWork(self.db):
            voucher = self._get(voucher_id)
            voucher.is_active = False
        logger.info(f"Voucher {voucher.code} deactivated")

    def hard_delete(self, voucher_id: int) -> None:
        with UnitOfWork(self.db):
            voucher = self._get(voucher_id)
            if self.repo.is_used_in_orders(voucher.id):
                raise VoucherInUse("Cannot delete voucher that has been used in orders", voucher_id=voucher_id)
            self.repo.delete(voucher)
        logger.info(f"Voucher {voucher_id} deleted")
