"""MoMo payment results — apply a verified IPN callback to its order.

A successful result confirms the order through the same path an admin
confirmation takes. Callbacks for orders that already left Pending are
replays and change nothing.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus
from storefront.order.placement import clear_user_cart
from storefront.order.status import confirm_order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class RecordMomoResult:
    order_code = String(required=True, max_length=20)
    result_code = Integer(required=True)
    trans_id = String(max_length=100)
    message = String(max_length=500)


def find_order_by_code(order_code) -> Order:
    code = (order_code or "").strip().upper()
    found = fetch_all(Order, order_code=code) if code else []
    if not found:
        raise ObjectNotFoundError(f"Order `{code}` does not exist")
    return found[0]


@storefront.command_handler(part_of=Order)
class MomoPaymentHandler:
    @handle(RecordMomoResult)
    def record_result(self, command):
        order = find_order_by_code(command.order_code)

        if order.current_status != OrderStatus.PENDING:
            logger.info(
                "Ignoring MoMo callback for settled order",
                order_code=order.order_code,
                status=order.status,
                result_code=command.result_code,
            )
            return order.status

        order.record_momo_result(command.result_code, trans_id=command.trans_id, message=command.message)
        if command.result_code == 0:
            confirm_order(order, via="momo")
            if order.user_id:
                clear_user_cart(order.user_id)
            logger.info("MoMo payment succeeded", order_code=order.order_code)
        else:
            logger.warning(
                "MoMo payment failed",
                order_code=order.order_code,
                result_code=command.result_code,
                message=command.message,
            )

        current_domain.repository_for(Order).add(order)
        return order.status
