"""BDD tests for the order lifecycle and stock reservation."""

from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import parsers, scenarios, then, when
from storefront.order.cancellation import CancelOrder
from storefront.order.expiry import ExpireReservedOrders
from storefront.order.order import Order
from storefront.order.status import ChangeOrderStatus

scenarios("features/order_lifecycle.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("a shopper orders {quantity:d} units"))
def _(place_order, product_id, order_ref, quantity):
    placed = place_order([{"product_id": product_id, "quantity": quantity}], user_id="user-1")
    order_ref["order_id"] = placed["order_id"]


@when(parsers.cfparse("a shopper tries to order {quantity:d} units"))
def _(place_order, product_id, error, quantity):
    try:
        place_order([{"product_id": product_id, "quantity": quantity}])
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the admin moves the order to "{status}"'))
def _(order_ref, status):
    current_domain.process(ChangeOrderStatus(order_id=order_ref["order_id"], status=status), asynchronous=False)


@when(parsers.cfparse("the reservation sweep runs {hours:d} hours later"))
def _(hours):
    as_of = datetime.now(UTC) + timedelta(hours=hours)
    current_domain.process(ExpireReservedOrders(as_of=as_of), asynchronous=False)


@when("the customer tries to cancel the order")
def _(order_ref, error):
    try:
        current_domain.process(
            CancelOrder(order_id=order_ref["order_id"], actor="Customer", user_id="user-1"), asynchronous=False
        )
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order note mentions "{text}"'))
def _(order_ref, text):
    assert text in current_domain.repository_for(Order).get(order_ref["order_id"]).note
