from sqlalchemy import Boolean, Column, Integer, ForeignKey, String, DateTime, Numeric, Text, JSON
from datetime import datetime, timezone

from storefront.data.database import Base


class PaymentMethodModel(Base):
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True)
    name = Column(String(20), nullable=False, unique=True)  # COD, MOMO, ZALOPAY, VNPAY
    display_name = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    payment_method_id = Column(Integer, ForeignKey("payment_methods.id"), nullable=False)

    status = Column(String(20), nullable=False, default="pending")
    amount = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="VND")
    transaction_id = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    gateway_data = Column(JSON, nullable=True)

    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
