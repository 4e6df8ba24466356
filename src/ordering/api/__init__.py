"""Ordering API package."""

from ordering.api.errors import register_error_handlers
from ordering.api.routes import checkout_router, order_router, payment_router, shop_router, user_router

ROUTERS = (user_router, shop_router, order_router, payment_router, checkout_router)

__all__ = [
    "ROUTERS",
    "checkout_router",
    "order_router",
    "payment_router",
    "register_error_handlers",
    "shop_router",
    "user_router",
]
