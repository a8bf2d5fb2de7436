# storefront/repos/order_repo.py
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, OrderDetailModel, OrderTrackingModel
from storefront.data.models.product import ProductModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_detail(self, detail: OrderDetailModel) -> OrderDetailModel:
        self.db.add(detail)
        self.db.flush()
        return detail

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_by_user(self, user_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def get_order_for_update(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id).with_for_update()
        ).scalar_one_or_none()

    def get_details(self, order_id: int) -> List[OrderDetailModel]:
        return list(
            self.db.execute(
                select(OrderDetailModel).where(OrderDetailModel.order_id == order_id).order_by(OrderDetailModel.id)
            ).scalars()
        )

    def get_details_with_products(self, order_id: int) -> List[Tuple[OrderDetailModel, str | None]]:
        rows = self.db.execute(
            select(OrderDetailModel, ProductModel.name)
            .outerjoin(ProductModel, OrderDetailModel.product_id == ProductModel.id)
            .where(OrderDetailModel.order_id == order_id)
            .order_by(OrderDetailModel.id)
        ).all()
        return [(detail, name) for detail, name in rows]

    def add_tracking(self, order_id: int, status: str, note: str | None = None) -> OrderTrackingModel:
        entry = OrderTrackingModel(order_id=order_id, status=status, note=note)
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_tracking(self, order_id: int) -> List[OrderTrackingModel]:
        return list(
            self.db.execute(
                select(OrderTrackingModel)
                .where(OrderTrackingModel.order_id == order_id)
                .order_by(OrderTrackingModel.id)
            ).scalars()
        )

    def find_stale_ids(self, status: str, created_before: datetime) -> List[int]:
        return list(
            self.db.execute(
                select(OrderModel.id).where(OrderModel.status == status, OrderModel.created_at < created_before)
            ).scalars()
        )

    def update_status_if(self, order_id: int, expected: str, new_status: str) -> int:
        # status flip only when nobody moved the order in the meantime
        res = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected)
            .values(status=new_status)
        )
        return res.rowcount
