"""Tests for the Cart aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import Cart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartItemUpdated


@pytest.fixture()
def cart():
    cart = Cart.create(user_id="user-1")
    cart._events.clear()
    return cart


class TestAddItem:
    def test_new_line(self, cart):
        cart.add_item("prod-1", 2, available=5)

        assert len(cart.items) == 1
        assert cart.line_for("prod-1").quantity == 2
        assert isinstance(cart._events[-1], CartItemAdded)

    def test_same_product_merges(self, cart):
        cart.add_item("prod-1", 2, available=5)
        cart.add_item("prod-1", 3, available=5)

        assert len(cart.items) == 1
        assert cart.line_for("prod-1").quantity == 5

    def test_merged_quantity_checked_against_stock(self, cart):
        cart.add_item("prod-1", 4, available=5)
        with pytest.raises(ValidationError) as exc:
            cart.add_item("prod-1", 2, available=5)
        assert "Only 5 left in stock" in str(exc.value)

    def test_zero_quantity_rejected(self, cart):
        with pytest.raises(ValidationError):
            cart.add_item("prod-1", 0, available=5)


class TestUpdateItem:
    def test_sets_quantity(self, cart):
        cart.add_item("prod-1", 1, available=5)
        cart.update_item("prod-1", 3, available=5)

        assert cart.line_for("prod-1").quantity == 3
        assert isinstance(cart._events[-1], CartItemUpdated)

    def test_zero_removes_line(self, cart):
        cart.add_item("prod-1", 1, available=5)
        cart.update_item("prod-1", 0, available=0)

        assert cart.line_for("prod-1") is None
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_unknown_product(self, cart):
        with pytest.raises(ValidationError):
            cart.update_item("prod-x", 1, available=5)


class TestClear:
    def test_clear_empties_cart(self, cart):
        cart.add_item("prod-1", 1, available=5)
        cart.add_item("prod-2", 1, available=5)
        cart.clear()

        assert len(cart.items) == 0
        assert isinstance(cart._events[-1], CartCleared)
        assert cart._events[-1].items_removed == 2
