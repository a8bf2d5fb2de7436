#import all models so SQLAlchemy registers them in Base.metadata

from storefront.data.models.product import ProductModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel, OrderDetailModel, OrderTrackingModel
from storefront.data.models.payment import PaymentMethodModel, PaymentModel
from storefront.data.models.voucher import VoucherModel, VoucherUsageModel, OrderVoucherModel

__all__ = [
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderDetailModel",
    "OrderTrackingModel",
    "PaymentMethodModel",
    "PaymentModel",
    "VoucherModel",
    "VoucherUsageModel",
    "OrderVoucherModel",
]
