"""Cart read model — lines enriched with the product's current name, price and image."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.management import find_cart
from storefront.product.product import Product


def cart_view(user_id, lang=None) -> dict:
    cart = find_cart(user_id)
    if cart is None:
        return {"id": None, "items": [], "total": 0.0}

    repo = current_domain.repository_for(Product)
    lines = []
    for line in cart.items:
        try:
            product = repo.get(line.product_id)
        except ObjectNotFoundError:
            # Product removed from the catalog since it was added
            continue
        lines.append(
            {
                "product_id": str(product.id),
                "slug": product.slug,
                "name": product.name.in_language(lang),
                "price_sale": product.price_sale,
                "images": product.image_list,
                "quantity": line.quantity,
                "in_stock": product.quantity,
                "subtotal": product.price_sale * line.quantity,
            }
        )

    return {
        "id": str(cart.id),
        "items": lines,
        "total": sum(line["subtotal"] for line in lines),
    }
