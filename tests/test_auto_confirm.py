from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from storefront.data.models import OrderModel
from storefront.repos.order_repo import OrderRepo
from storefront.tasks import auto_confirm

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_order(db):
    def _make(status="NEW", age_minutes=45):
        order = OrderModel(
            user_id=1,
            status=status,
            payment_method="COD",
            total_amount=Decimal("100000"),
            created_at=NOW - timedelta(minutes=age_minutes),
        )
        db.add(order)
        db.commit()
        return order

    return _make


def status_of(db, order):
    db.expire_all()
    return db.get(OrderModel, order.id).status


class TestAutoConfirm:
    def test_only_stale_new_orders_are_confirmed(self, db, make_order):
        stale = make_order(age_minutes=45)
        fresh = make_order(age_minutes=5)
        preparing = make_order(status="PREPARING", age_minutes=120)
        cancelled = make_order(status="CANCELED", age_minutes=120)

        assert auto_confirm.auto_confirm_orders(db, now=NOW) == 1

        assert status_of(db, stale) == "CONFIRMED"
        assert status_of(db, fresh) == "NEW"
        assert status_of(db, preparing) == "PREPARING"
        assert status_of(db, cancelled) == "CANCELED"

    def test_confirmation_is_tracked(self, db, make_order):
        order = make_order()

        auto_confirm.auto_confirm_orders(db, now=NOW)

        tracking = OrderRepo(db).get_tracking(order.id)
        assert [(t.status, t.note) for t in tracking] == [("CONFIRMED", "Confirmed automatically")]

    def test_second_run_changes_nothing(self, db, make_order):
        make_order()

        auto_confirm.auto_confirm_orders(db, now=NOW)
        assert auto_confirm.auto_confirm_orders(db, now=NOW) == 0

    def test_celery_task_uses_its_own_session(self, engine, db, make_order, monkeypatch):
        order = make_order(age_minutes=60 * 24 * 365 * 10)
        monkeypatch.setattr(auto_confirm, "SessionLocal", sessionmaker(bind=engine, expire_on_commit=False))

        assert auto_confirm.auto_confirm_orders_task() == 1
        assert status_of(db, order) == "CONFIRMED"
