# storefront/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.enums import CartStatus
from storefront.domain.errors import ConcurrencyConflict, Forbidden, InvalidQuantity, NotFound
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart use cases feeding checkout.
    commands (create, add, remove) change state and bump the cart version,
    query (get) only reads. Prices are not stored on the cart; checkout
    snapshots the current product price.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def _load_owned(self, cart_id: int, user_id: int) -> CartModel:
        cart = self.repo.get_cart(cart_id)

        if not cart:
            raise NotFound(f"Cart with ID {cart_id} not found", cart_id=cart_id)

        if cart.user_id != user_id:
            raise Forbidden("Cart does not belong to this user", cart_id=cart_id)

        return cart

    def _to_dict(self, cart: CartModel) -> Dict[str, Any]:
        lines = []
        total = Decimal("0.00")

        for i in self.repo.get_cart_items(cart.id):
            product = self.products.get_product(i.product_id)
            price = product.price if product else Decimal("0.00")
            total += price * i.quantity
            lines.append({"product_id": i.product_id, "quantity": i.quantity, "price": price})

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "status": cart.status,
            "items": lines,
            "total": total,
        }

    def _bump_version(self, cart: CartModel):
        # UPDATE carts SET version = v + 1 WHERE id = :id AND version = v
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={"version": cart.version + 1},
        )

        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflict("Cart was modified by another operation", cart_id=cart.id)

    #query
    def get_cart(self, cart_id: int, user_id: int) -> Dict[str, Any]:
        return self._to_dict(self._load_owned(cart_id, user_id))

    #commands
    def create_cart(self, user_id: int) -> Dict[str, Any]:
        # at most one active cart per user
        existing = self.repo.get_active_cart_by_user(user_id)

        if existing:
            logger.info(f"User {user_id} already has active cart {existing.id}")
            return self._to_dict(existing)

        try:
            created = self.repo.create_cart(CartModel(user_id=user_id, status=CartStatus.ACTIVE.value, version=1))
            self.repo.commit()
        except IntegrityError:
            # a concurrent request created it first
            self.repo.rollback()
            existing = self.repo.get_active_cart_by_user(user_id)
            logger.info(f"User {user_id} got active cart {existing.id} from a concurrent request")
            return self._to_dict(existing)

        logger.info(f"Created cart {created.id} for user {user_id}")
        return self._to_dict(created)

    def add_product(self, user_id: int, cart_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidQuantity("Quantity must be greater than 0", quantity=quantity)

        cart = self._load_owned(cart_id, user_id)

        if not self.products.get_product(product_id):
            raise NotFound(f"Product with ID {product_id} not found", product_id=product_id)

        existing_item = self.repo.get_cart_item(cart_id, product_id)

        if existing_item:
            logger.info(
                f"Product {product_id} already in cart {cart_id}, quantity "
                f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
            self.repo.add_cart_item(existing_item)
        else:
            self.repo.add_cart_item(CartItemModel(cart_id=cart_id, product_id=product_id, quantity=quantity))

        self._bump_version(cart)
        self.repo.commit()

        logger.info(f"Product {product_id} added to cart {cart_id}")
        return self.get_cart(cart_id, user_id)

    def remove_product(self, user_id: int, cart_id: int, product_id: int) -> Dict[str, Any]:
        cart = self._load_owned(cart_id, user_id)

        if self.repo.delete_cart_item(cart_id, product_id) == 0:
            raise NotFound(f"Product {product_id} is not in cart {cart_id}", product_id=product_id)

        self._bump_version(cart)
        self.repo.commit()

        logger.info(f"Product {product_id} removed from cart {cart_id}")
        return self.get_cart(cart_id, user_id)
