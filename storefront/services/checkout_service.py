# storefront/services/checkout_service.py
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, OrderDetailModel
from storefront.data.unit_of_work import UnitOfWork
from storefront.domain.enums import OrderPaymentStatus, OrderStatus, PaymentStatus
from storefront.domain.errors import (
    AmountMismatch,
    ConcurrencyConflict,
    EmptyCart,
    Forbidden,
    InsufficientStock,
    NotFound,
    PaymentMethodInactive,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.payment_repo import PaymentRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services import order_lifecycle
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.notification_service import NotificationService, publish
from storefront.services.payment_service import PaymentService
from storefront.services.presenters import (
    detail_to_dict,
    order_to_dict,
    payment_to_dict,
    tracking_to_dict,
)
from storefront.services.voucher_engine import VoucherEngine
from storefront.utils.logging import get_logger
from storefront.utils.retry import db_retry
from storefront.utils.settings import AMOUNT_EPSILON

logger = get_logger(__name__)


def _money(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class CheckoutOrchestrator:
    """
    Turns a cart into an order + payment, and owns the reverse flow
    (cancellation) and COD settlement.

    Every use case runs in one UnitOfWork: cart, stock, order, voucher
    counters and payment are either all changed or none is. Stock and
    voucher counters are only touched through InventoryLedger and
    VoucherEngine. Notifications go out after the commit.
    """

    def __init__(self, db: Session, notifier: NotificationService | None = None):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.payment_repo = PaymentRepo(db)
        self.ledger = InventoryLedger(db)
        self.vouchers = VoucherEngine(db)
        self.notifier = notifier or NotificationService()
        self.payments = PaymentService(db, self.notifier)

    #commands
    @db_retry()
    def create_order_with_payment(
        self,
        user_id: int,
        cart_id: int,
        payment_method_id: int,
        total_amount,
        voucher_code: str | None = None,
        final_amount=None,
        shipping_address: str | None = None,
        notes: str | None = None,
    ) -> Dict[str, Any]:
        """
        Use case: checkout.

        1. cart exists, belongs to the user, is not empty (and is claimed via its version)
        2. payment method exists and is active
        3. every line is in stock, subtotal from current prices
        4. optional voucher validated, declared final amount checked
        5. declared total checked against the subtotal
        6-10. order + details, stock decrement, payment, voucher usage, cart cleared

        Retried as a whole on lock/connection failures; a failed attempt
        leaves nothing behind.
        """
        with UnitOfWork(self.db):
            summary = self._checkout(
                user_id=user_id,
                cart_id=cart_id,
                payment_method_id=payment_method_id,
                declared_total=_money(total_amount),
                voucher_code=voucher_code,
                declared_final=_money(final_amount) if final_amount is not None else None,
                shipping_address=shipping_address,
                notes=notes,
            )

        logger.info(
            f"Order {summary['order']['id']} created from cart {cart_id} "
            f"(total {summary['total_amount']}, discount {summary['voucher_discount']})"
        )
        publish(self.notifier.send_order_created, user_id, summary["order"]["id"])
        return summary

    def _checkout(
        self,
        user_id: int,
        cart_id: int,
        payment_method_id: int,
        declared_total: Decimal,
        voucher_code: str | None,
        declared_final: Decimal | None,
        shipping_address: str | None,
        notes: str | None,
    ) -> Dict[str, Any]:
        # 1. cart
        cart = self.carts.get_cart(cart_id)
        if not cart:
            raise NotFound(f"Cart with ID {cart_id} not found", cart_id=cart_id)

        if cart.user_id != user_id:
            raise Forbidden("Cart does not belong to this user", cart_id=cart_id)

        items = self.carts.get_cart_items(cart_id)
        if not items:
            raise EmptyCart("Cart is empty", cart_id=cart_id)

        # claim the cart, a parallel checkout of the same cart loses here
        rowcount = self.carts.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1},
        )
        if rowcount == 0:
            raise ConcurrencyConflict("Cart was modified by another operation", cart_id=cart_id)

        # 2. payment method
        method = self.payment_repo.get_payment_method(payment_method_id)
        if not method:
            raise NotFound(f"Payment method with ID {payment_method_id} not found", payment_method_id=payment_method_id)

        if not method.is_active:
            raise PaymentMethodInactive("Payment method is not active", payment_method_id=payment_method_id)

        # 3. stock + subtotal, product rows locked until commit
        products = self.products.lock_products(i.product_id for i in items)
        lines: List[Dict[str, Any]] = []
        subtotal = Decimal("0.00")

        for item in items:
            product = products.get(item.product_id)
            if not product:
                raise NotFound(f"Product with ID {item.product_id} not found", product_id=item.product_id)

            if not self.ledger.check_available(product.id, item.quantity):
                raise InsufficientStock(product.id, item.quantity, product.stock_quantity, product.name)

            price = _money(product.price)
            line_total = price * item.quantity
            subtotal += line_total
            lines.append(
                {"product_id": product.id, "quantity": item.quantity, "price": price, "total": line_total}
            )

        # 4. voucher
        discount = Decimal("0")
        final = subtotal
        voucher_id = None

        if voucher_code:
            result = self.vouchers.validate(voucher_code, user_id, subtotal)
            discount = result["discount"]
            final = result["final_amount"]
            voucher_id = result["voucher_id"]

        if declared_final is not None and abs(final - declared_final) > AMOUNT_EPSILON:
            raise AmountMismatch(
                f"Final amount mismatch. Calculated: {final}, Provided: {declared_final}",
                calculated=str(final),
                provided=str(declared_final),
            )

        # 5. declared total vs server subtotal
        if abs(subtotal - declared_total) > AMOUNT_EPSILON:
            raise AmountMismatch(
                f"Total amount mismatch. Calculated: {subtotal}, Provided: {declared_total}",
                calculated=str(subtotal),
                provided=str(declared_total),
            )

        # 6. order + price snapshots
        order = self.orders.create_order(
            OrderModel(
                user_id=user_id,
                total_amount=final,
                voucher_discount=discount,
                status=OrderStatus.NEW.value,
                payment_method=method.name,
                payment_status=OrderPaymentStatus.PENDING.value,
                shipping_address=shipping_address,
                notes=notes,
            )
        )
        details = [
            self.orders.add_detail(OrderDetailModel(order_id=order.id, **line))
            for line in lines
        ]
        self.orders.add_tracking(order.id, OrderStatus.NEW.value, "Order placed")

        # 7. inventory
        for line in sorted(lines, key=lambda l: l["product_id"]):
            self.ledger.decrement(line["product_id"], line["quantity"])

        # 8. payment
        payment = self.payments.create(order, method.id, final)

        # 9. voucher usage, same transaction as the order
        if voucher_id is not None:
            self.vouchers.record_usage(voucher_id, user_id, order.id, discount)

        # 10. cart
        self.carts.clear_items(cart_id)

        return {
            "order": order_to_dict(order),
            "payment": payment_to_dict(payment),
            "order_details": [detail_to_dict(d, products[d.product_id].name) for d in details],
            "total_items": len(items),
            "total_amount": final,
            "voucher_discount": discount,
        }

    def cancel_order(self, order_id: int, reason: str | None = None) -> Dict[str, Any]:
        """
        Use case: user cancellation.

        NEW/CONFIRMED orders are cancelled at once with stock restored;
        PREPARING orders only get a CANCEL_REQUEST for staff to decide.
        """
        with UnitOfWork(self.db):
            order = self.orders.get_order_for_update(order_id)
            if not order:
                raise NotFound(f"Order with ID {order_id} not found", order_id=order_id)

            target = order_lifecycle.cancel_target(order.status)

            if target == OrderStatus.CANCEL_REQUEST:
                order.status = OrderStatus.CANCEL_REQUEST.value
                self.orders.add_tracking(order.id, order.status, reason or "Cancellation requested")
                logger.info(f"Cancellation of order {order.id} requested, waiting for staff")
            else:
                self._cancel(order, reason)

        publish(self.notifier.send_order_cancelled, order.user_id, order.id, order.status)
        return order_to_dict(order)

    def _cancel(self, order: OrderModel, reason: str | None) -> None:
        note = reason or "Order cancelled"

        for detail in self.orders.get_details(order.id):
            self.ledger.restore(detail.product_id, detail.quantity)

        # legacy orders may have no payment row, that is not an error
        try:
            payment = self.payments.find_by_order_id(order.id)
            self.payments.set_status(payment, PaymentStatus.CANCELLED, gateway_data={"reason": note})
        except NotFound:
            logger.info(f"Order {order.id} has no payment to cancel")

        order.payment_status = OrderPaymentStatus.CANCELLED.value
        # status flip last, after stock is back
        order.status = OrderStatus.CANCELED.value
        self.orders.add_tracking(order.id, order.status, note)
        self.db.flush()
        logger.info(f"Order {order.id} cancelled, stock restored")

    def process_cod_payment(self, order_id: int) -> Dict[str, Any]:
        with UnitOfWork(self.db):
            order = self.orders.get_order_for_update(order_id)
            if not order:
                raise NotFound(f"Order with ID {order_id} not found", order_id=order_id)

            order_lifecycle.assert_cod_settleable(order.payment_method, order.status, order.payment_status)

            payment = self.payment_repo.get_by_order_id(order.id)
            if payment:
                self.payments.set_status(payment, PaymentStatus.SUCCESS)

            order.payment_status = OrderPaymentStatus.PAID.value
            order.status = OrderStatus.DELIVERED.value
            self.orders.add_tracking(order.id, order.status, "COD payment collected on delivery")

        logger.info(f"COD payment of order {order.id} settled")
        publish(self.notifier.send_payment_received, order.user_id, order.id)
        return order_to_dict(order)

    def update_status(self, order_id: int, status: str, note: str | None = None) -> Dict[str, Any]:
        """Staff-driven transition; approving a cancel request runs the full cancellation."""
        with UnitOfWork(self.db):
            order = self.orders.get_order_for_update(order_id)
            if not order:
                raise NotFound(f"Order with ID {order_id} not found", order_id=order_id)

            target = order_lifecycle.transition(order.status, status)

            if target == OrderStatus.CANCELED:
                self._cancel(order, note or "Cancellation approved")
            else:
                order.status = target.value
                self.orders.add_tracking(order.id, order.status, note)

        logger.info(f"Order {order.id} moved to {order.status}")
        publish(self.notifier.send_order_status_changed, order.user_id, order.id, order.status)
        return order_to_dict(order)

    #queries
    def get_order_with_payment(self, order_id: int) -> Dict[str, Any]:
        order = self.orders.get_order(order_id)
        if not order:
            raise NotFound(f"Order with ID {order_id} not found", order_id=order_id)

        payment = self.payment_repo.get_by_order_id(order_id)

        return {
            "order": order_to_dict(order),
            "payment": payment_to_dict(payment) if payment else None,
            "order_details": [detail_to_dict(d, name) for d, name in self.orders.get_details_with_products(order_id)],
        }

    def get_user_orders(self, user_id: int) -> List[Dict[str, Any]]:
        """Order history of a user, newest first."""
        return [order_to_dict(o) for o in self.orders.list_by_user(user_id)]

    def get_tracking(self, order_id: int) -> List[Dict[str, Any]]:
        if not self.orders.get_order(order_id):
            raise NotFound(f"Order with ID {order_id} not found", order_id=order_id)
        return [tracking_to_dict(t) for t in self.orders.get_tracking(order_id)]
