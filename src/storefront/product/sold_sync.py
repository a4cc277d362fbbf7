"""Sold counter resync — rebuild ``Product.sold`` from order history.

Used after imports or manual data fixes, when counters may have drifted from
the orders that actually went through. Only products that appear in at least
one Confirmed, Shipping or Completed order are touched.
"""

from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from storefront.domain import storefront
from storefront.order.order import SOLD_STATES, Order
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class SyncSoldCounters:
    dry_run = Boolean(default=False)


def sold_totals() -> dict[str, int]:
    totals = defaultdict(int)
    for status in SOLD_STATES:
        for order in fetch_all(Order, status=status.value):
            for product_id, quantity in order.quantities():
                totals[product_id] += quantity
    return dict(totals)


@storefront.command_handler(part_of=Product)
class SyncSoldCountersHandler:
    @handle(SyncSoldCounters)
    def sync(self, command):
        repo = current_domain.repository_for(Product)
        updated = 0

        for product_id, total in sold_totals().items():
            try:
                product = repo.get(product_id)
            except ObjectNotFoundError:
                logger.warning("Sold total for missing product", product_id=product_id, total=total)
                continue

            if (product.sold or 0) == total:
                continue

            logger.info("Resetting sold counter", sku=product.sku, previous=product.sold, sold=total)
            updated += 1
            if not command.dry_run:
                product.reset_sold(total)
                repo.add(product)

        logger.info("Sold counter sync complete", updated=updated, dry_run=bool(command.dry_run))
        return updated
