"""Stock and ``sold`` side effects of order state changes.

These run inside the command handler's unit of work, so the order and the
products it touches are committed together.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.order.order import Order, OrderStatus
from storefront.product.product import Product

logger = structlog.get_logger(__name__)

_SALE_COUNTED = {OrderStatus.CONFIRMED, OrderStatus.SHIPPING}


def _adjust_products(order: Order, adjust):
    repo = current_domain.repository_for(Product)
    for product_id, quantity in order.quantities():
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            logger.warning(
                "Product no longer exists, skipping adjustment",
                order_code=order.order_code,
                product_id=product_id,
            )
            continue
        adjust(product, quantity)
        repo.add(product)


def record_sales(order: Order):
    """Count the order's units as sold."""
    _adjust_products(order, lambda product, qty: product.record_sale(qty))


def release_stock(order: Order, previous_status: OrderStatus):
    """Return the order's units to stock, reversing the sale if it was counted."""
    reverse = previous_status in _SALE_COUNTED

    def adjust(product, qty):
        product.restock(qty)
        if reverse:
            product.reverse_sale(qty)

    _adjust_products(order, adjust)
    logger.info(
        "Stock released",
        order_code=order.order_code,
        previous_status=previous_status.value,
        sale_reversed=reverse,
    )
