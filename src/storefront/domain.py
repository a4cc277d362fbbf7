"""Storefront bounded context — catalog, carts, orders and payments.

Owns the order/inventory workflow: stock is withdrawn when an order is
placed, held for the reservation window while the order is Pending, and
returned when the order is cancelled or its reservation expires.
"""

import structlog
from protean.domain import Domain

from shared.logging import configure_logging

configure_logging()

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
