from sqlalchemy import (
    Boolean, Column, Integer, ForeignKey, String, DateTime, Numeric,
    CheckConstraint, UniqueConstraint,
)
from datetime import datetime, timezone

from storefront.data.database import Base


class VoucherModel(Base):
    __tablename__ = "vouchers"

    id = Column(Integer, primary_key=True)
    code = Column(String(50), nullable=False, unique=True)  # stored uppercase
    description = Column(String(255), nullable=True)

    discount_type = Column(String(20), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=True)  # null for freeship
    min_order_value = Column(Numeric(12, 2), nullable=False, default=0)
    max_discount = Column(Numeric(12, 2), nullable=True)  # percentage only

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    usage_limit = Column(Integer, nullable=True)  # null = unlimited
    used_count = Column(Integer, nullable=False, default=0)
    per_user_limit = Column(Integer, nullable=True)  # null = unlimited

    combinable = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_voucher_period"),
        CheckConstraint("usage_limit IS NULL OR used_count <= usage_limit", name="ck_voucher_usage"),
    )


class VoucherUsageModel(Base):
    __tablename__ = "voucher_usages"

    id = Column(Integer, primary_key=True)
    voucher_id = Column(Integer, ForeignKey("vouchers.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    times_used = Column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("voucher_id", "user_id", name="u_voucher_user"),)


class OrderVoucherModel(Base):
    __tablename__ = "order_vouchers"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    voucher_id = Column(Integer, ForeignKey("vouchers.id", ondelete="RESTRICT"), nullable=False)

    code_snapshot = Column(String(50), nullable=False)
    discount_type_snapshot = Column(String(20), nullable=False)
    discount_value_snapshot = Column(Numeric(10, 2), nullable=True)
    discount_applied = Column(Numeric(15, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # one redemption per order and voucher, makes usage recording idempotent
    __table_args__ = (UniqueConstraint("order_id", "voucher_id", name="u_order_voucher"),)
