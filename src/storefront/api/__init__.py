"""Storefront domain API package."""

from storefront.api.routes import (
    admin_router,
    cart_router,
    category_router,
    momo_router,
    order_router,
    product_router,
)

__all__ = ["product_router", "category_router", "cart_router", "order_router", "momo_router", "admin_router"]
