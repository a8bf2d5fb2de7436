from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Text, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from storefront.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)

    status = Column(String(50), nullable=False, default="NEW")
    payment_method = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending")

    total_amount = Column(Numeric(15, 2), nullable=False)
    voucher_discount = Column(Numeric(15, 2), nullable=False, default=0)

    shipping_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    details = relationship("OrderDetailModel", back_populates="order", order_by="OrderDetailModel.id")

    __table_args__ = (CheckConstraint("total_amount >= 0", name="ck_order_total_non_negative"),)


class OrderDetailModel(Base):
    __tablename__ = "order_details"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    # price snapshot taken at checkout, never updated
    price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(15, 2), nullable=False)

    order = relationship("OrderModel", back_populates="details")


class OrderTrackingModel(Base):
    __tablename__ = "order_tracking"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(50), nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
