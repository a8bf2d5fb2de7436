import os

# must be set before storefront modules build their engine and celery app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.celery_worker import celery_app
from storefront.data.database import Base
from storefront.data.models import (
    CartItemModel,
    CartModel,
    PaymentMethodModel,
    ProductModel,
    VoucherModel,
)
from storefront.domain.enums import CartStatus, VoucherDiscountType

celery_app.conf.task_always_eager = True


class FakeNotifier:
    def __init__(self):
        self.events = []

    def send_order_created(self, user_id, order_id):
        self.events.append(("ORDER_CREATED", user_id, order_id))

    def send_order_cancelled(self, user_id, order_id, status):
        self.events.append((f"ORDER_{status}", user_id, order_id))

    def send_order_status_changed(self, user_id, order_id, status):
        self.events.append((f"ORDER_STATUS_{status}", user_id, order_id))

    def send_payment_received(self, user_id, order_id):
        self.events.append(("PAYMENT_RECEIVED", user_id, order_id))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_product(db):
    def _make(name="Product", price="100000", stock=10):
        product = ProductModel(name=name, price=Decimal(price), stock_quantity=stock)
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_payment_method(db):
    def _make(name="COD", is_active=True):
        method = PaymentMethodModel(name=name, display_name=name, is_active=is_active)
        db.add(method)
        db.commit()
        return method

    return _make


@pytest.fixture
def make_cart(db):
    def _make(user_id=1, items=()):
        cart = CartModel(user_id=user_id, status=CartStatus.ACTIVE.value, version=1)
        db.add(cart)
        db.flush()
        for product, quantity in items:
            db.add(CartItemModel(cart_id=cart.id, product_id=product.id, quantity=quantity))
        db.commit()
        return cart

    return _make


@pytest.fixture
def make_voucher(db):
    def _make(**overrides):
        now = datetime.now(timezone.utc)
        data = dict(
            code="SALE10",
            discount_type=VoucherDiscountType.PERCENTAGE.value,
            discount_value=Decimal("10"),
            min_order_value=Decimal("100000"),
            max_discount=Decimal("50000"),
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=1),
            usage_limit=None,
            used_count=0,
            per_user_limit=None,
            combinable=False,
            is_active=True,
        )
        data.update(overrides)
        voucher = VoucherModel(**data)
        db.add(voucher)
        db.commit()
        return voucher

    return _make
