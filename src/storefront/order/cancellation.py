"""Order cancellation by a customer or an admin."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import CancellationActor, Order
from storefront.order.status import cancel_order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor = String(choices=CancellationActor, default=CancellationActor.CUSTOMER.value)
    user_id = Identifier()  # Required when a customer cancels
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        actor = CancellationActor(command.actor)

        if actor == CancellationActor.CUSTOMER and not order.is_owned_by(command.user_id):
            raise ValidationError({"order": ["You can only cancel your own orders"]})

        cancel_order(order, actor, reason=command.reason)
        repo.add(order)
        return order.status
