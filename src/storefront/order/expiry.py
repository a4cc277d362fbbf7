"""Reservation expiry — cancel Pending orders whose reservation ran out.

Triggered on a cron schedule (see ``scheduler``) or from ``manage.py
sweep-reservations``. Each expired order is cancelled as System, which puts
its stock back on the shelf.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.fields import DateTime
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from shared.settings import get_settings
from storefront.domain import storefront
from storefront.order.order import AUTO_CANCEL_NOTE, CancellationActor, Order, OrderStatus
from storefront.order.status import cancel_order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ExpireReservedOrders:
    """Cancel every Pending order whose reservation ended before ``as_of``."""

    as_of = DateTime()  # Optional: defaults to now


@storefront.command_handler(part_of=Order)
class ExpireReservedOrdersHandler:
    @handle(ExpireReservedOrders)
    def expire_reserved_orders(self, command):
        as_of = command.as_of or datetime.now(UTC)
        hours = get_settings().reservation_hours

        logger.info("Checking for expired reservations", as_of=as_of.isoformat())

        pending = fetch_all(Order, status=OrderStatus.PENDING.value)
        expired = [order for order in pending if order.reservation_expired(as_of)]

        if not expired:
            logger.info("No expired reservations found")
            return 0

        repo = current_domain.repository_for(Order)
        expired_count = 0
        for order in expired:
            try:
                cancel_order(order, CancellationActor.SYSTEM, reason=AUTO_CANCEL_NOTE.format(hours=hours))
                repo.add(order)
                expired_count += 1
                logger.info(
                    "Cancelled expired order",
                    order_code=order.order_code,
                    reserved_until=str(order.reserved_until),
                )
            except (ValidationError, InvalidOperationError, ObjectNotFoundError) as exc:
                logger.warning(
                    "Failed to cancel expired order",
                    order_code=order.order_code,
                    error=str(exc),
                )

        logger.info("Reservation sweep complete", expired_count=expired_count)
        return expired_count
