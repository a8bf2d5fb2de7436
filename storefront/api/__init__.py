# storefront/api/__init__.py
from storefront.api.routers import carts, checkout, health, orders, payments, vouchers

ROUTERS = [
    health.router,
    carts.router,
    checkout.router,
    orders.router,
    payments.router,
    vouchers.router,
]
