import pytest

from storefront.domain.enums import OrderStatus
from storefront.domain.errors import InvalidTransition
from storefront.services import order_lifecycle


class TestCancelTarget:
    @pytest.mark.parametrize("status", ["NEW", "CONFIRMED"])
    def test_early_orders_are_cancelled_at_once(self, status):
        assert order_lifecycle.cancel_target(status) == OrderStatus.CANCELED

    def test_preparing_order_only_gets_a_request(self):
        assert order_lifecycle.cancel_target("PREPARING") == OrderStatus.CANCEL_REQUEST

    @pytest.mark.parametrize("status", ["SHIPPING", "DELIVERED", "CANCELED", "CANCEL_REQUEST"])
    def test_late_orders_cannot_be_cancelled(self, status):
        with pytest.raises(InvalidTransition):
            order_lifecycle.cancel_target(status)

    def test_legacy_status_values_are_understood(self):
        assert order_lifecycle.cancel_target("pending") == OrderStatus.CANCELED
        with pytest.raises(InvalidTransition):
            order_lifecycle.cancel_target("completed")


class TestTransition:
    @pytest.mark.parametrize(
        "current,target",
        [
            ("NEW", "CONFIRMED"),
            ("CONFIRMED", "PREPARING"),
            ("PREPARING", "SHIPPING"),
            ("SHIPPING", "DELIVERED"),
            ("CANCEL_REQUEST", "CANCELED"),
            ("CANCEL_REQUEST", "PREPARING"),
        ],
    )
    def test_allowed(self, current, target):
        assert order_lifecycle.transition(current, target) == OrderStatus(target)

    @pytest.mark.parametrize(
        "current,target",
        [
            ("NEW", "SHIPPING"),
            ("SHIPPING", "CANCELED"),
            ("DELIVERED", "NEW"),
            ("CANCELED", "CONFIRMED"),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(InvalidTransition):
            order_lifecycle.transition(current, target)

    def test_terminal_states(self):
        assert order_lifecycle.is_terminal("DELIVERED")
        assert order_lifecycle.is_terminal("CANCELED")
        assert not order_lifecycle.is_terminal("SHIPPING")

    def test_can_cancel(self):
        assert order_lifecycle.can_cancel("NEW")
        assert not order_lifecycle.can_cancel("SHIPPING")


class TestCodSettlement:
    def test_cod_order_can_be_settled(self):
        order_lifecycle.assert_cod_settleable("COD", "SHIPPING", "pending")

    def test_only_cod(self):
        with pytest.raises(InvalidTransition):
            order_lifecycle.assert_cod_settleable("MOMO", "SHIPPING", "pending")

    def test_not_after_cancellation(self):
        with pytest.raises(InvalidTransition):
            order_lifecycle.assert_cod_settleable("COD", "CANCELED", "cancelled")

    def test_not_twice(self):
        with pytest.raises(InvalidTransition):
            order_lifecycle.assert_cod_settleable("COD", "DELIVERED", "paid")
