"""Order e-mails — reacts to Order events by mailing the customer and the shop.

Delivery problems are logged and never propagate; an unreachable mail relay
must not roll back an order.
"""

import structlog
from protean.utils.mixins import handle

from shared.settings import get_settings
from storefront.domain import storefront
from storefront.mail import get_mailer, templates
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


def _deliver(to, message, **context):
    result = get_mailer().send(to=to, subject=message["subject"], body=message["body"])
    if result.get("status") != "sent":
        logger.warning("Order e-mail not delivered", to=to, error=result.get("error"), **context)
    return result


@storefront.event_handler(part_of=Order)
class OrderMailer:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        if event.customer_email:
            _deliver(event.customer_email, templates.order_confirmation(event), order_code=event.order_code)
        _deliver(get_settings().shop_admin_email, templates.new_order_alert(event), order_code=event.order_code)

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        # Cancellation has its own mail
        if not event.customer_email or event.new_status == OrderStatus.CANCELLED.value:
            return
        _deliver(event.customer_email, templates.status_update(event), order_code=event.order_code)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        if event.customer_email:
            _deliver(event.customer_email, templates.cancellation(event), order_code=event.order_code)
