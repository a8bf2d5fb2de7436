import pytest

from storefront.data.models import ProductModel
from storefront.domain.errors import InsufficientStock, NotFound
from storefront.services.inventory_ledger import InventoryLedger


class TestDecrement:
    def test_takes_quantity_off_stock(self, db, make_product):
        product = make_product(stock=5)

        InventoryLedger(db).decrement(product.id, 2)
        db.commit()

        assert db.get(ProductModel, product.id).stock_quantity == 3

    def test_can_take_the_last_units(self, db, make_product):
        product = make_product(stock=2)

        InventoryLedger(db).decrement(product.id, 2)
        db.commit()

        assert db.get(ProductModel, product.id).stock_quantity == 0

    def test_refuses_to_go_below_zero(self, db, make_product):
        product = make_product(name="Sneakers", stock=1)

        with pytest.raises(InsufficientStock) as exc:
            InventoryLedger(db).decrement(product.id, 2)

        assert exc.value.details == {"product_id": product.id, "requested": 2, "available": 1}
        assert "Sneakers" in exc.value.message
        db.rollback()
        assert db.get(ProductModel, product.id).stock_quantity == 1

    def test_unknown_product(self, db):
        with pytest.raises(NotFound):
            InventoryLedger(db).decrement(999, 1)

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_rejects_non_positive_quantity(self, db, make_product, quantity):
        product = make_product(stock=5)

        with pytest.raises(ValueError):
            InventoryLedger(db).decrement(product.id, quantity)


class TestRestore:
    def test_puts_quantity_back(self, db, make_product):
        product = make_product(stock=3)

        assert InventoryLedger(db).restore(product.id, 2) is True
        db.commit()

        assert db.get(ProductModel, product.id).stock_quantity == 5

    def test_decrement_then_restore_conserves_stock(self, db, make_product):
        product = make_product(stock=7)
        ledger = InventoryLedger(db)

        ledger.decrement(product.id, 4)
        ledger.restore(product.id, 4)
        db.commit()

        assert db.get(ProductModel, product.id).stock_quantity == 7

    def test_missing_product_is_skipped(self, db):
        assert InventoryLedger(db).restore(999, 1) is False


class TestCheckAvailable:
    def test_enough_stock(self, db, make_product):
        product = make_product(stock=2)
        assert InventoryLedger(db).check_available(product.id, 2) is True

    def test_not_enough_stock(self, db, make_product):
        product = make_product(stock=2)
        assert InventoryLedger(db).check_available(product.id, 3) is False

    def test_unknown_product(self, db):
        with pytest.raises(NotFound):
            InventoryLedger(db).check_available(42, 1)
