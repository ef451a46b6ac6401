"""Storefront API package."""

from storefront.api.errors import register_storefront_handlers
from storefront.api.routes import (
    cart_router,
    maintenance_router,
    order_router,
    product_router,
    wishlist_router,
)

__all__ = [
    "cart_router",
    "maintenance_router",
    "order_router",
    "product_router",
    "register_storefront_handlers",
    "wishlist_router",
]
