# storefront/services/order_lifecycle.py
"""
Order status state machine.

Pure functions over status values; nothing here touches the database.

    NEW -> CONFIRMED -> PREPARING -> SHIPPING -> DELIVERED
    NEW, CONFIRMED  -> CANCELED
    PREPARING       -> CANCEL_REQUEST -> CANCELED (approved) | PREPARING (rejected)
"""
from typing import Dict, FrozenSet

from storefront.domain.enums import OrderPaymentStatus, OrderStatus, PaymentMethodName, parse_order_status
from storefront.domain.errors import InvalidTransition

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.NEW: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.SHIPPING, OrderStatus.CANCEL_REQUEST}),
    OrderStatus.CANCEL_REQUEST: frozenset({OrderStatus.CANCELED, OrderStatus.PREPARING}),
    OrderStatus.SHIPPING: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
}

TERMINAL = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELED})

CANCELLABLE = frozenset({OrderStatus.NEW, OrderStatus.CONFIRMED, OrderStatus.PREPARING})


def is_terminal(status: str) -> bool:
    return parse_order_status(status) in TERMINAL


def can_cancel(status: str) -> bool:
    return parse_order_status(status) in CANCELLABLE


def cancel_target(status: str) -> OrderStatus:
    """
    Status a user cancellation leads to.

    Once the shop is preparing, goods may already be packed, so the user
    only files a cancel request that staff must approve.
    """
    current = parse_order_status(status)
    if current not in CANCELLABLE:
        raise InvalidTransition(f"Order in status {current.value} cannot be cancelled", status=current.value)
    if current == OrderStatus.PREPARING:
        return OrderStatus.CANCEL_REQUEST
    return OrderStatus.CANCELED


def transition(status: str, target: str) -> OrderStatus:
    current = parse_order_status(status)
    wanted = parse_order_status(target)
    if wanted not in TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move order from {current.value} to {wanted.value}",
            status=current.value,
            target=wanted.value,
        )
    return wanted


def assert_cod_settleable(payment_method: str, status: str, payment_status: str) -> None:
    # COD is settled at delivery confirmation, the order becomes DELIVERED + PAID in one step
    if payment_method != PaymentMethodName.COD.value:
        raise InvalidTransition("Order is not using COD payment method", payment_method=payment_method)

    current = parse_order_status(status)
    if current in (OrderStatus.CANCELED, OrderStatus.CANCEL_REQUEST):
        raise InvalidTransition(f"Cannot settle COD payment of an order in status {current.value}", status=current.value)
    if payment_status == OrderPaymentStatus.PAID.value:
        raise InvalidTransition("COD payment already settled", payment_status=payment_status)
