from decimal import Decimal

import pytest

from sqlalchemy.exc import IntegrityError

from storefront.data.models import CartModel
from storefront.domain.errors import Forbidden, InvalidQuantity, NotFound
from storefront.services.cart_service import CartService


class TestCreateCart:
    def test_new_cart(self, db):
        cart = CartService(db).create_cart(9)

        assert cart["user_id"] == 9
        assert cart["status"] == "ACTIVE"
        assert cart["items"] == []
        assert cart["total"] == Decimal("0.00")

    def test_one_active_cart_per_user(self, db):
        first = CartService(db).create_cart(9)
        second = CartService(db).create_cart(9)

        assert first["cart_id"] == second["cart_id"]

    def test_database_refuses_second_active_cart(self, db, make_cart):
        make_cart(user_id=7)
        db.add(CartModel(user_id=7, status="ACTIVE", version=1))

        with pytest.raises(IntegrityError):
            db.flush()
        db.rollback()

    def test_inactive_carts_do_not_count(self, db):
        db.add(CartModel(user_id=7, status="ORDERED", version=3))
        db.commit()

        cart = CartService(db).create_cart(7)

        assert cart["status"] == "ACTIVE"
        assert db.query(CartModel).filter_by(user_id=7).count() == 2

    def test_concurrent_create_returns_the_existing_cart(self, db, make_cart, monkeypatch):
        existing = make_cart(user_id=7)
        service = CartService(db)
        lookup = service.repo.get_active_cart_by_user
        lookups = []

        def lookup_before_other_request_committed(user_id):
            lookups.append(user_id)
            return None if len(lookups) == 1 else lookup(user_id)

        monkeypatch.setattr(service.repo, "get_active_cart_by_user", lookup_before_other_request_committed)

        cart = service.create_cart(7)

        assert cart["cart_id"] == existing.id
        assert len(lookups) == 2
        assert db.query(CartModel).filter_by(user_id=7).count() == 1


class TestItems:
    def test_add_product_prices_from_catalog(self, db, make_product):
        product = make_product(price="50000", stock=10)
        cart = CartService(db).create_cart(1)

        result = CartService(db).add_product(1, cart["cart_id"], product.id, 3)

        assert result["items"] == [{"product_id": product.id, "quantity": 3, "price": Decimal("50000")}]
        assert result["total"] == Decimal("150000")

    def test_adding_again_merges_quantity(self, db, make_product):
        product = make_product()
        service = CartService(db)
        cart = service.create_cart(1)

        service.add_product(1, cart["cart_id"], product.id, 1)
        result = service.add_product(1, cart["cart_id"], product.id, 2)

        assert len(result["items"]) == 1
        assert result["items"][0]["quantity"] == 3

    def test_every_change_bumps_version(self, db, make_product):
        product = make_product()
        service = CartService(db)
        cart = service.create_cart(1)

        service.add_product(1, cart["cart_id"], product.id, 1)
        service.remove_product(1, cart["cart_id"], product.id)

        db.expire_all()
        assert db.get(CartModel, cart["cart_id"]).version == 3

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_invalid_quantity(self, db, make_product, quantity):
        product = make_product()
        cart = CartService(db).create_cart(1)

        with pytest.raises(InvalidQuantity):
            CartService(db).add_product(1, cart["cart_id"], product.id, quantity)

    def test_unknown_product(self, db):
        cart = CartService(db).create_cart(1)
        with pytest.raises(NotFound):
            CartService(db).add_product(1, cart["cart_id"], 404, 1)

    def test_remove_missing_item(self, db):
        cart = CartService(db).create_cart(1)
        with pytest.raises(NotFound):
            CartService(db).remove_product(1, cart["cart_id"], 404)

    def test_other_users_cart(self, db, make_product):
        product = make_product()
        cart = CartService(db).create_cart(1)

        with pytest.raises(Forbidden):
            CartService(db).add_product(2, cart["cart_id"], product.id, 1)
        with pytest.raises(Forbidden):
            CartService(db).get_cart(cart["cart_id"], 2)

    def test_unknown_cart(self, db):
        with pytest.raises(NotFound):
            CartService(db).get_cart(404, 1)
