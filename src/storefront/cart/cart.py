"""Cart aggregate — one per registered user, holding products and quantities.

Stock is not held by the cart; quantities are only checked against the
product's stock at the moment they change. Stock is withdrawn when the cart
turns into an order.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartItemUpdated
from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartLine)
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        return cls(user_id=user_id, updated_at=datetime.now(UTC))

    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @staticmethod
    def _check_stock(quantity, available):
        if quantity > available:
            raise ValidationError({"quantity": [f"Only {available} left in stock"]})

    def add_item(self, product_id, quantity, available):
        """Add ``quantity`` units, merging with an existing line for the same product."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.line_for(product_id)
        now = datetime.now(UTC)

        if existing:
            self._check_stock(existing.quantity + quantity, available)
            existing.quantity += quantity
        else:
            self._check_stock(quantity, available)
            self.add_items(CartLine(product_id=product_id, quantity=quantity, added_at=now))

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                quantity=quantity,
            )
        )

    def update_item(self, product_id, quantity, available):
        """Set a line's quantity; zero or less removes the line."""
        line = self.line_for(product_id)
        if line is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        if quantity <= 0:
            self.remove_item(product_id)
            return

        self._check_stock(quantity, available)
        previous = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        line = self.line_for(product_id)
        if line is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def clear(self):
        removed = len(self.items)
        for line in list(self.items):
            self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), items_removed=removed))
