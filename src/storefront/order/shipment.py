"""Shipping details — carrier and tracking number for a Confirmed or Shipping order."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class AssignShipment:
    order_id = Identifier(required=True)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=255)


@storefront.command_handler(part_of=Order)
class AssignShipmentHandler:
    @handle(AssignShipment)
    def assign_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assign_shipment(command.carrier, command.tracking_number)
        repo.add(order)
