"""Public order tracking — what a shopper sees after typing an order code.

Anyone holding the code can look the order up, so only delivery-facing
details are returned. Item names and chosen attributes are shown in the
requested language, falling back to Vietnamese.
"""

from storefront.order.order import OrderStatus, PaymentMethod
from storefront.order.payment import find_order_by_code
from storefront.shared.localized import format_vnd, localize


def _attributes(line, lang) -> dict:
    return {localize(pair.get("name"), lang): localize(pair.get("value"), lang) for pair in line.attribute_pairs}


def track_order(order_code, lang="vi") -> dict:
    order = find_order_by_code(order_code)
    status = OrderStatus(order.status)

    return {
        "order_code": order.order_code,
        "status": status.label(lang),
        "status_key": status.value,
        "customer_name": order.customer.name,
        "phone": order.customer.phone,
        "address": order.customer.address,
        "order_date": order.created_at.strftime("%H:%M:%S %d/%m/%Y") if order.created_at else None,
        "total_amount": format_vnd(order.total),
        "payment_method": PaymentMethod(order.payment_method).label,
        "carrier": order.carrier,
        "tracking_number": order.tracking_number,
        "items": [
            {
                "name": line.name.in_language(lang),
                "quantity": line.quantity,
                "price": format_vnd(line.price),
                "img_url": line.img_url or "",
                "selected_attributes": _attributes(line, lang),
            }
            for line in order.items
        ],
    }
