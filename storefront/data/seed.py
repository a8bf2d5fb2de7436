# storefront/data/seed.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models import PaymentMethodModel, ProductModel, VoucherModel
from storefront.domain.enums import PaymentMethodName, VoucherDiscountType
from storefront.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

PRODUCTS = [
    ("Cotton T-shirt", Decimal("50000"), 100),
    ("Denim jacket", Decimal("125000"), 20),
    ("Canvas sneakers", Decimal("450000"), 15),
]

PAYMENT_METHODS = [
    (PaymentMethodName.COD, "Cash on delivery"),
    (PaymentMethodName.MOMO, "MoMo e-wallet"),
    (PaymentMethodName.ZALOPAY, "ZaloPay"),
    (PaymentMethodName.VNPAY, "VNPay"),
]


def _vouchers(now: datetime):
    start, end = now - timedelta(days=1), now + timedelta(days=90)
    return [
        VoucherModel(
            code="SALE10",
            description="10% off, up to 50 000",
            discount_type=VoucherDiscountType.PERCENTAGE.value,
            discount_value=Decimal("10"),
            max_discount=Decimal("50000"),
            min_order_value=Decimal("100000"),
            start_date=start,
            end_date=end,
            usage_limit=1000,
            per_user_limit=1,
        ),
        VoucherModel(
            code="FIX50K",
            description="50 000 off orders from 300 000",
            discount_type=VoucherDiscountType.FIXED.value,
            discount_value=Decimal("50000"),
            min_order_value=Decimal("300000"),
            start_date=start,
            end_date=end,
            usage_limit=500,
            per_user_limit=2,
        ),
        VoucherModel(
            code="FREESHIP",
            description="Free shipping",
            discount_type=VoucherDiscountType.FREESHIP.value,
            min_order_value=Decimal("0"),
            start_date=start,
            end_date=end,
        ),
    ]


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            logger.info("Database already seeded")
            return

        db.add_all(ProductModel(name=n, price=p, stock_quantity=s) for n, p, s in PRODUCTS)
        db.add_all(PaymentMethodModel(name=m.value, display_name=d, is_active=True) for m, d in PAYMENT_METHODS)
        db.add_all(_vouchers(datetime.now(timezone.utc)))
        db.commit()

        logger.info(f"Seeded {len(PRODUCTS)} products, {len(PAYMENT_METHODS)} payment methods and 3 vouchers")
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    Base.metadata.create_all(bind=engine)
    seed()
