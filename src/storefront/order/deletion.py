"""Order deletion — admins may remove Completed or Cancelled orders."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_deleted()
        repo.add(order)
        repo._dao.delete(order)
        logger.info("Order deleted", order_code=order.order_code)
