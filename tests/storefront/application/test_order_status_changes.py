"""Application tests for admin status changes, cancellation, shipment and deletion."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from storefront.order.cancellation import CancelOrder
from storefront.order.deletion import DeleteOrder
from storefront.order.order import Order, OrderStatus
from storefront.order.shipment import AssignShipment
from storefront.order.status import ChangeOrderStatus
from storefront.product.product import Product


def _change(order_id, status, reason=None):
    return current_domain.process(
        ChangeOrderStatus(order_id=order_id, status=status, reason=reason), asynchronous=False
    )


@pytest.fixture()
def placed(create_product, place_order):
    """A Pending order for 3 units of a product that started with 10 in stock."""
    product_id = create_product(quantity=10)
    order = place_order([{"product_id": product_id, "quantity": 3}], user_id="user-1")
    return {"product_id": product_id, **order}


class TestAdminStatusChanges:
    def test_confirm_records_sale(self, placed, load):
        assert _change(placed["order_id"], "Confirmed") == "Confirmed"

        product = load(Product, placed["product_id"])
        assert product.sold == 3
        assert product.quantity == 7

    def test_full_happy_path(self, placed, load):
        for status in ("Confirmed", "Shipping", "Completed"):
            _change(placed["order_id"], status)

        assert load(Order, placed["order_id"]).current_status == OrderStatus.COMPLETED
        assert load(Product, placed["product_id"]).sold == 3

    def test_cannot_skip_states(self, placed):
        with pytest.raises(ValidationError) as exc:
            _change(placed["order_id"], "Completed")
        assert "Cannot transition from Pending to Completed" in str(exc.value)

    def test_terminal_state_is_final(self, placed):
        _change(placed["order_id"], "Cancelled")
        with pytest.raises(ValidationError):
            _change(placed["order_id"], "Confirmed")

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            _change("missing", "Confirmed")


class TestAdminCancellation:
    def test_cancel_pending_restores_stock(self, placed, load):
        _change(placed["order_id"], "Cancelled", reason="Khách đổi ý")

        order = load(Order, placed["order_id"])
        assert order.cancelled_by == "Admin"
        assert order.cancellation_reason == "Khách đổi ý"
        product = load(Product, placed["product_id"])
        assert product.quantity == 10
        assert product.sold == 0

    def test_cancel_confirmed_reverses_sale(self, placed, load):
        _change(placed["order_id"], "Confirmed")
        _change(placed["order_id"], "Cancelled")

        product = load(Product, placed["product_id"])
        assert product.quantity == 10
        assert product.sold == 0

    def test_cancel_shipping_reverses_sale(self, placed, load):
        _change(placed["order_id"], "Confirmed")
        _change(placed["order_id"], "Shipping")
        _change(placed["order_id"], "Cancelled")

        product = load(Product, placed["product_id"])
        assert product.quantity == 10
        assert product.sold == 0

    def test_cancel_survives_deleted_product(self, placed, load):
        product = load(Product, placed["product_id"])
        repo = current_domain.repository_for(Product)
        repo._dao.delete(product)

        assert _change(placed["order_id"], "Cancelled") == "Cancelled"


class TestCustomerCancellation:
    def test_owner_cancels_pending(self, placed, load):
        status = current_domain.process(
            CancelOrder(order_id=placed["order_id"], actor="Customer", user_id="user-1"), asynchronous=False
        )
        assert status == "Cancelled"
        assert load(Order, placed["order_id"]).cancelled_by == "Customer"
        assert load(Product, placed["product_id"]).quantity == 10

    def test_other_user_cannot_cancel(self, placed):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                CancelOrder(order_id=placed["order_id"], actor="Customer", user_id="user-2"), asynchronous=False
            )
        assert "own orders" in str(exc.value)

    def test_customer_cannot_cancel_confirmed(self, placed):
        _change(placed["order_id"], "Confirmed")
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                CancelOrder(order_id=placed["order_id"], actor="Customer", user_id="user-1"), asynchronous=False
            )
        assert "Customer can only cancel orders in Pending state" in str(exc.value)

    def test_admin_cancel_through_cancel_command(self, placed, load):
        _change(placed["order_id"], "Confirmed")
        current_domain.process(CancelOrder(order_id=placed["order_id"], actor="Admin"), asynchronous=False)

        assert load(Product, placed["product_id"]).sold == 0


class TestShipmentAndDeletion:
    def test_assign_shipment(self, placed, load):
        _change(placed["order_id"], "Confirmed")
        current_domain.process(
            AssignShipment(order_id=placed["order_id"], carrier="GHN", tracking_number="GHN123456"),
            asynchronous=False,
        )

        order = load(Order, placed["order_id"])
        assert order.carrier == "GHN"
        assert order.tracking_number == "GHN123456"

    def test_shipment_needs_confirmed_order(self, placed):
        with pytest.raises(ValidationError):
            current_domain.process(
                AssignShipment(order_id=placed["order_id"], carrier="GHN", tracking_number="X1"),
                asynchronous=False,
            )

    def test_delete_cancelled_order(self, placed):
        _change(placed["order_id"], "Cancelled")
        current_domain.process(DeleteOrder(order_id=placed["order_id"]), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Order).get(placed["order_id"])

    def test_cannot_delete_open_order(self, placed, load):
        with pytest.raises(ValidationError):
            current_domain.process(DeleteOrder(order_id=placed["order_id"]), asynchronous=False)
        assert load(Order, placed["order_id"]) is not None
