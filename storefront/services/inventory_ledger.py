# storefront/services/inventory_ledger.py
from sqlalchemy import update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import InsufficientStock, NotFound
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    """
    The only writer of products.stock_quantity.

    Each decrement/restore is one conditional UPDATE (read-modify-write in
    the database), so concurrent checkouts cannot both pass a check and
    then both subtract past zero. Runs inside the caller's transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepo(db)

    def check_available(self, product_id: int, quantity: int) -> bool:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFound(f"Product with ID {product_id} not found", product_id=product_id)
        return product.stock_quantity >= quantity

    def decrement(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        # UPDATE products SET stock = stock - :n WHERE id = :id AND stock >= :n
        res = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock_quantity >= quantity)
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
        )

        if res.rowcount == 0:
            product = self.products.get_product(product_id)
            if not product:
                raise NotFound(f"Product with ID {product_id} not found", product_id=product_id)
            self.db.refresh(product)
            logger.warning(
                f"Stock decrement rejected for product {product_id}: "
                f"requested {quantity}, available {product.stock_quantity}"
            )
            raise InsufficientStock(product_id, quantity, product.stock_quantity, product.name)

        logger.info(f"Stock of product {product_id} decremented by {quantity}")

    def restore(self, product_id: int, quantity: int) -> bool:
        """Puts quantity back. Returns False when the product no longer exists."""
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        res = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock_quantity=ProductModel.stock_quantity + quantity)
        )

        if res.rowcount == 0:
            logger.warning(f"Cannot restore {quantity} units: product {product_id} no longer exists")
            return False

        logger.info(f"Stock of product {product_id} restored by {quantity}")
        return True
