"""Admin status updates — move an order along the transition map.

Confirmation counts the units as sold; cancellation goes through the same
path as every other cancel so stock is restored exactly once.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.inventory import record_sales, release_stock
from storefront.order.order import CancellationActor, Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    reason = String(max_length=500)


def confirm_order(order: Order, via="admin"):
    order.confirm(via=via)
    record_sales(order)


def cancel_order(order: Order, actor: CancellationActor, reason=None):
    previous = order.cancel(actor.value, reason=reason)
    release_stock(order, previous)
    return previous


@storefront.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        target = OrderStatus(command.status)

        if target == OrderStatus.CONFIRMED:
            confirm_order(order)
        elif target == OrderStatus.CANCELLED:
            cancel_order(order, CancellationActor.ADMIN, reason=command.reason)
        elif target == OrderStatus.SHIPPING:
            order.ship()
        elif target == OrderStatus.COMPLETED:
            order.complete()
        else:
            order._assert_can_transition(target)

        repo.add(order)
        logger.info("Order status changed", order_code=order.order_code, previous=previous, new=order.status)
        return order.status
