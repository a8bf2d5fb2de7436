# storefront/repos/payment_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.payment import PaymentMethodModel, PaymentModel


class PaymentRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_payment_method(self, payment_method_id: int) -> PaymentMethodModel | None:
        return self.db.get(PaymentMethodModel, payment_method_id)

    def get_payment(self, payment_id: int) -> PaymentModel | None:
        return self.db.get(PaymentModel, payment_id)

    def get_by_order_id(self, order_id: int) -> PaymentModel | None:
        return self.db.execute(
            select(PaymentModel).where(PaymentModel.order_id == order_id)
        ).scalar_one_or_none()

    def create_payment(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.flush()
        return payment

    def create_payment_method(self, method: PaymentMethodModel) -> PaymentMethodModel:
        self.db.add(method)
        self.db.flush()
        return method
