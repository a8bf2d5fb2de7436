from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.data.models import OrderModel, VoucherModel
from storefront.domain.errors import InvalidVoucher, NotFound, VoucherCodeExists, VoucherInactive, VoucherInUse
from storefront.services.voucher_engine import VoucherEngine
from storefront.services.voucher_service import VoucherService

NOW = datetime.now(timezone.utc)


def voucher_data(**overrides):
    data = {
        "code": "summer20",
        "discount_type": "PERCENTAGE",
        "discount_value": Decimal("20"),
        "max_discount": Decimal("100000"),
        "start_date": NOW - timedelta(days=1),
        "end_date": NOW + timedelta(days=30),
    }
    data.update(overrides)
    return data


class TestCreate:
    def test_code_is_normalized(self, db):
        created = VoucherService(db).create(voucher_data())

        assert created["code"] == "SUMMER20"
        assert created["used_count"] == 0
        assert created["is_active"] is True
        assert created["min_order_value"] == Decimal("0")

    def test_duplicate_code(self, db):
        VoucherService(db).create(voucher_data())
        with pytest.raises(VoucherCodeExists):
            VoucherService(db).create(voucher_data(code=" Summer20 "))

    def test_end_before_start(self, db):
        with pytest.raises(InvalidVoucher):
            VoucherService(db).create(voucher_data(end_date=NOW - timedelta(days=2)))

    def test_percentage_over_100(self, db):
        with pytest.raises(InvalidVoucher):
            VoucherService(db).create(voucher_data(discount_value=Decimal("120")))

    def test_fixed_needs_a_value(self, db):
        with pytest.raises(InvalidVoucher):
            VoucherService(db).create(voucher_data(discount_type="FIXED", discount_value=None))

    def test_freeship_without_value(self, db):
        created = VoucherService(db).create(voucher_data(code="SHIP", discount_type="FREESHIP", discount_value=None))
        assert created["discount_type"] == "FREESHIP"

    def test_nothing_saved_on_error(self, db):
        with pytest.raises(InvalidVoucher):
            VoucherService(db).create(voucher_data(discount_value=Decimal("120")))
        assert VoucherService(db).list_vouchers() == []


class TestUpdate:
    def test_partial_update(self, db):
        created = VoucherService(db).create(voucher_data())

        updated = VoucherService(db).update(created["id"], {"per_user_limit": 2, "code": "winter"})

        assert updated["per_user_limit"] == 2
        assert updated["code"] == "WINTER"
        assert updated["discount_value"] == Decimal("20")

    @pytest.mark.parametrize(
        "field", ["start_date", "end_date", "min_order_value", "discount_type", "combinable", "is_active"]
    )
    def test_required_fields_cannot_be_cleared(self, db, make_voucher, field):
        voucher = make_voucher()

        with pytest.raises(InvalidVoucher) as exc:
            VoucherService(db).update(voucher.id, {field: None})

        assert exc.value.details["fields"] == [field]
        db.expire_all()
        assert getattr(db.get(VoucherModel, voucher.id), field) is not None

    def test_optional_fields_can_be_cleared(self, db, make_voucher):
        voucher = make_voucher(usage_limit=10, per_user_limit=1)

        updated = VoucherService(db).update(voucher.id, {"max_discount": None, "usage_limit": None, "per_user_limit": None})

        assert updated["max_discount"] is None
        assert updated["usage_limit"] is None
        assert updated["per_user_limit"] is None

    def test_usage_limit_below_used_count(self, db, make_voucher):
        voucher = make_voucher(usage_limit=10, used_count=4)
        with pytest.raises(InvalidVoucher):
            VoucherService(db).update(voucher.id, {"usage_limit": 3})

    def test_code_taken_by_another_voucher(self, db, make_voucher):
        make_voucher(code="TAKEN")
        other = make_voucher(code="OTHER")
        with pytest.raises(VoucherCodeExists):
            VoucherService(db).update(other.id, {"code": "taken"})

    def test_unknown_voucher(self, db):
        with pytest.raises(NotFound):
            VoucherService(db).update(404, {"is_active": False})


class TestDelete:
    def test_deactivated_voucher_stops_validating(self, db, make_voucher):
        voucher = make_voucher()
        VoucherService(db).deactivate(voucher.id)

        assert db.get(VoucherModel, voucher.id).is_active is False
        with pytest.raises(VoucherInactive):
            VoucherEngine(db).validate("SALE10", 1, Decimal("250000"))

    def test_unused_voucher_can_be_deleted(self, db, make_voucher):
        voucher = make_voucher()
        VoucherService(db).hard_delete(voucher.id)
        assert db.get(VoucherModel, voucher.id) is None

    def test_used_voucher_cannot_be_deleted(self, db, make_voucher):
        voucher = make_voucher()
        order = OrderModel(user_id=1, payment_method="COD", total_amount=Decimal("225000"))
        db.add(order)
        db.commit()
        VoucherEngine(db).record_usage(voucher.id, 1, order.id, Decimal("25000"))
        db.commit()

        with pytest.raises(VoucherInUse):
            VoucherService(db).hard_delete(voucher.id)

        assert db.get(VoucherModel, voucher.id) is not None
