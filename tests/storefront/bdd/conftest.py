"""Shared BDD fixtures and step definitions for the Storefront domain."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then
from storefront.order.order import Order
from storefront.order.status import ChangeOrderStatus
from storefront.product.product import Product


@pytest.fixture()
def error():
    """Container for a captured validation error."""
    return {"exc": None}


@pytest.fixture()
def order_ref():
    return {"order_id": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" with {quantity:d} units in stock'), target_fixture="product_id")
def _(create_product, name, quantity):
    return create_product(name_vi=name, quantity=quantity)


@given(parsers.cfparse("a shopper ordered {quantity:d} units"))
def _(place_order, product_id, order_ref, quantity):
    placed = place_order([{"product_id": product_id, "quantity": quantity}], user_id="user-1")
    order_ref["order_id"] = placed["order_id"]


@given(parsers.cfparse('the admin moved the order to "{status}"'))
def _(order_ref, status):
    current_domain.process(ChangeOrderStatus(order_id=order_ref["order_id"], status=status), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order is "{status}"'))
def _(order_ref, status):
    assert current_domain.repository_for(Order).get(order_ref["order_id"]).status == status


@then(parsers.cfparse("the product has {quantity:d} units in stock"))
def _(product_id, quantity):
    assert current_domain.repository_for(Product).get(product_id).quantity == quantity


@then(parsers.cfparse("the product has sold {sold:d} units"))
def _(product_id, sold):
    assert current_domain.repository_for(Product).get(product_id).sold == sold


@then(parsers.cfparse('the order is rejected with "{message}"'))
def _(error, message):
    assert error["exc"] is not None
    assert message in str(error["exc"])
