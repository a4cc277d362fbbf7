"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A checkout succeeded: stock was withdrawn and the order is Pending."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    user_id = Identifier()
    customer_name = String(required=True)
    customer_email = String()
    customer_phone = String()
    payment_method = String(required=True)
    items = Text(required=True)  # JSON list of {product_id, name, price, quantity}
    total = Float(required=True)
    reserved_until = DateTime(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderConfirmed:
    """The shop (or a MoMo payment) accepted the order; units now count as sold."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    total = Float(required=True)
    confirmed_via = String(required=True)  # "admin" or "momo"
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    customer_email = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its stock returned to the shelf."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    previous_status = String(required=True)
    cancelled_by = String(required=True)
    reason = String()
    customer_email = String()
    total = Float(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ShipmentAssigned:
    __version__ = 1

    order_id = Identifier(required=True)
    carrier = String(required=True)
    tracking_number = String(required=True)


@storefront.event(part_of="Order")
class OrderDeleted:
    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    status = String(required=True)


@storefront.event(part_of="Order")
class MomoPaymentRecorded:
    """A MoMo IPN callback was received for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    result_code = Integer(required=True)
    trans_id = String()
    message = String()
    succeeded = Boolean(required=True)
