# storefront/services/payment_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.unit_of_work import UnitOfWork
from storefront.data.models.order import OrderModel
from storefront.data.models.payment import PaymentModel
from storefront.domain.enums import OrderPaymentStatus, OrderStatus, PaymentStatus, parse_order_status
from storefront.domain.errors import AmountMismatch, InvalidTransition, NotFound, PaymentAlreadyExists
from storefront.repos.order_repo import OrderRepo
from storefront.repos.payment_repo import PaymentRepo
from storefront.services.notification_service import NotificationService, publish
from storefront.services.presenters import payment_to_dict
from storefront.utils.logging import get_logger
from storefront.utils.settings import CURRENCY

logger = get_logger(__name__)

# payment status -> order.payment_status
_ORDER_PAYMENT_STATUS = {
    PaymentStatus.PENDING: OrderPaymentStatus.PENDING,
    PaymentStatus.SUCCESS: OrderPaymentStatus.PAID,
    PaymentStatus.FAILED: OrderPaymentStatus.FAILED,
    PaymentStatus.CANCELLED: OrderPaymentStatus.CANCELLED,
    PaymentStatus.REFUNDED: OrderPaymentStatus.REFUNDED,
}

# the gateway cannot reopen these
_CLOSED_PAYMENT_STATUSES = {PaymentStatus.CANCELLED.value, PaymentStatus.REFUNDED.value}


class PaymentService:
    """
    Payment rows, one per order. The gateway itself is opaque: it reports
    back a status and a transaction id through update_status.
    """

    def __init__(self, db: Session, notifier: NotificationService | None = None):
        self.db = db
        self.repo = PaymentRepo(db)
        self.orders = OrderRepo(db)
        self.notifier = notifier or NotificationService()

    def create(self, order: OrderModel, payment_method_id: int, amount: Decimal) -> PaymentModel:
        if self.repo.get_by_order_id(order.id):
            raise PaymentAlreadyExists(f"Payment already exists for order {order.id}", order_id=order.id)

        if Decimal(amount) != Decimal(order.total_amount):
            raise AmountMismatch(
                "Payment amount does not match order total amount",
                calculated=str(order.total_amount),
                provided=str(amount),
            )

        payment = self.repo.create_payment(
            PaymentModel(
                order_id=order.id,
                payment_method_id=payment_method_id,
                status=PaymentStatus.PENDING.value,
                amount=amount,
                currency=CURRENCY,
                description=f"Payment for order #{order.id}",
            )
        )
        logger.info(f"Payment {payment.id} created for order {order.id} ({amount} {CURRENCY})")
        return payment

    def find_by_order_id(self, order_id: int) -> PaymentModel:
        payment = self.repo.get_by_order_id(order_id)
        if not payment:
            raise NotFound(f"Payment for order {order_id} not found", order_id=order_id)
        return payment

    def set_status(
        self,
        payment: PaymentModel,
        status: PaymentStatus,
        transaction_id: str | None = None,
        gateway_data: Dict[str, Any] | None = None,
    ) -> PaymentModel:
        """Mutates the payment within the caller's transaction."""
        if status == PaymentStatus.SUCCESS and not payment.paid_at:
            payment.paid_at = datetime.now(timezone.utc)

        payment.status = status.value

        if transaction_id:
            payment.transaction_id = transaction_id

        if gateway_data:
            payment.gateway_data = {**(payment.gateway_data or {}), **gateway_data}

        self.db.flush()
        return payment

    def update_status(
        self,
        payment_id: int,
        status: PaymentStatus,
        transaction_id: str | None = None,
        gateway_data: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """
        Gateway callback: records the outcome and mirrors it onto
        order.payment_status in one transaction.
        """
        with UnitOfWork(self.db):
            payment = self.repo.get_payment(payment_id)
            if not payment:
                raise NotFound(f"Payment with ID {payment_id} not found", payment_id=payment_id)

            if payment.status in _CLOSED_PAYMENT_STATUSES:
                raise InvalidTransition(
                    f"Payment {payment.id} is already {payment.status}", payment_id=payment.id, status=payment.status
                )

            order = self.orders.get_order(payment.order_id)
            if order and parse_order_status(order.status) == OrderStatus.CANCELED:
                raise InvalidTransition(
                    f"Order {order.id} is cancelled, payment {payment.id} cannot change", order_id=order.id
                )

            self.set_status(payment, status, transaction_id, gateway_data)

            if order:
                order.payment_status = _ORDER_PAYMENT_STATUS[status].value

        logger.info(f"Payment {payment.id} of order {payment.order_id} is now {status.value}")

        if status == PaymentStatus.SUCCESS and order:
            publish(self.notifier.send_payment_received, order.user_id, order.id)

        return payment_to_dict(payment)
