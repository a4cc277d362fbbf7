"""Cart management — add, update, remove and clear commands.

Carts are created lazily: the first ``AddToCart`` for a user makes one.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.product.product import Product


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


def find_cart(user_id) -> Cart | None:
    carts = fetch_all(Cart, user_id=str(user_id))
    return carts[0] if carts else None


def _existing_cart(user_id) -> Cart:
    cart = find_cart(user_id)
    if cart is None:
        raise ValidationError({"cart": ["Cart is empty"]})
    return cart


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        cart = find_cart(command.user_id) or Cart.create(user_id=command.user_id)

        cart.add_item(product.id, command.quantity or 1, available=product.quantity)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _existing_cart(command.user_id)
        available = 0
        if command.quantity > 0:
            available = current_domain.repository_for(Product).get(command.product_id).quantity

        cart.update_item(command.product_id, command.quantity, available=available)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _existing_cart(command.user_id)
        cart.remove_item(command.product_id)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = find_cart(command.user_id)
        if cart is None or not cart.items:
            return 0

        removed = len(cart.items)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
        return removed
