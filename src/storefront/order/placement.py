"""Order placement — turn a checkout into a Pending order holding stock.

Every requested line is checked against stock before anything is withdrawn,
so a shortage on one product leaves all products untouched.
"""

import json
from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from shared.settings import get_settings
from storefront.cart.cart import Cart
from storefront.cart.management import find_cart
from storefront.domain import storefront
from storefront.order.order import Order, PaymentMethod, generate_order_code
from storefront.product.product import Product

logger = structlog.get_logger(__name__)

_CODE_ATTEMPTS = 5


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier()  # Optional for guest checkout
    customer_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=20)
    email = String(max_length=254)
    address = String(required=True, max_length=400)
    city = String(max_length=100)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    note = Text()
    items = Text(required=True)  # JSON list of {product_id, quantity, selected_attributes}


def _parse_items(raw) -> list[dict]:
    items = json.loads(raw) if isinstance(raw, str) else raw
    if not items:
        raise ValidationError({"items": ["An order needs at least one item"]})

    parsed = []
    for item in items:
        quantity = int(item.get("quantity") or 0)
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        parsed.append(
            {
                "product_id": str(item["product_id"]),
                "quantity": quantity,
                "selected_attributes": item.get("selected_attributes") or {},
            }
        )
    return parsed


def _unique_order_code() -> str:
    for _ in range(_CODE_ATTEMPTS):
        code = generate_order_code()
        if not fetch_all(Order, order_code=code):
            return code
    raise ValidationError({"order_code": ["Could not allocate a unique order code, please retry"]})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        settings = get_settings()
        requested = _parse_items(command.items)
        product_repo = current_domain.repository_for(Product)

        # Load every product first; a missing one aborts with ObjectNotFoundError
        products = {item["product_id"]: product_repo.get(item["product_id"]) for item in requested}

        wanted = defaultdict(int)
        for item in requested:
            wanted[item["product_id"]] += item["quantity"]
        for product_id, quantity in wanted.items():
            product = products[product_id]
            if quantity > product.quantity:
                raise ValidationError(
                    {"quantity": [f'Product "{product.name.vi}" has only {product.quantity} left in stock']}
                )

        for product_id, quantity in wanted.items():
            products[product_id].withdraw_stock(quantity)

        lines = []
        for item in requested:
            product = products[item["product_id"]]
            images = product.image_list
            lines.append(
                {
                    "product_id": str(product.id),
                    "name": product.name.to_dict(),
                    "price": product.price_sale,
                    "quantity": item["quantity"],
                    "img_url": images[0] if images else None,
                    "selected_attributes": product.resolve_attributes(item["selected_attributes"]),
                }
            )

        address = command.address.strip()
        if command.city:
            address = f"{address}, {command.city.strip()}"

        order = Order.place(
            order_code=_unique_order_code(),
            customer={
                "name": command.customer_name,
                "phone": command.phone,
                "email": command.email,
                "address": address,
            },
            lines=lines,
            payment_method=command.payment_method or PaymentMethod.COD.value,
            user_id=command.user_id,
            note=command.note,
            reservation_hours=settings.reservation_hours,
        )

        current_domain.repository_for(Order).add(order)
        for product in products.values():
            product_repo.add(product)

        # MoMo carts are cleared once the wallet payment succeeds
        if command.user_id and order.payment_method != PaymentMethod.MOMO.value:
            clear_user_cart(command.user_id)

        logger.info(
            "Order placed",
            order_code=order.order_code,
            total=order.total,
            payment_method=order.payment_method,
            lines=len(lines),
        )
        return {"order_id": str(order.id), "order_code": order.order_code, "total": order.total}


def clear_user_cart(user_id):
    cart = find_cart(user_id)
    if cart is None or not cart.items:
        return
    cart.clear()
    current_domain.repository_for(Cart).add(cart)
