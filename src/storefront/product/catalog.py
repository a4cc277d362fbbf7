"""Catalog read side — listing, search and suggestions over the Product repository.

Products are filtered and sorted in Python after a repository fetch; the
catalog is small enough (a few thousand items) that this stays cheap.
"""

import math
from datetime import datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from shared.clock import as_naive_utc
from shared.queries import fetch_all
from storefront.product.product import Product
from storefront.shared.localized import fold

SORT_OPTIONS = ("newest", "price-asc", "price-desc", "-sold")
SUGGESTION_LIMIT = 10


def _all_products() -> list[Product]:
    return fetch_all(Product)


_EPOCH = datetime(1970, 1, 1)


def _sort_key(sort):
    """Return ``(key, reverse)`` for a catalog sort option."""
    if sort == "price-asc":
        return (lambda p: p.price_sale or 0), False
    if sort == "price-desc":
        return (lambda p: p.price_sale or 0), True
    if sort == "-sold":
        return (lambda p: p.sold or 0), True
    return (lambda p: as_naive_utc(p.created_at) or _EPOCH), True


def list_products(
    category_id=None,
    hot=None,
    on_sale=None,
    sort="newest",
    page=1,
    limit=12,
    lang=None,
) -> dict:
    products = _all_products()

    if category_id:
        products = [p for p in products if str(category_id) in p.category_list]
    if hot is not None:
        products = [p for p in products if bool(p.hot) == hot]
    if on_sale is not None:
        products = [p for p in products if bool(p.on_sale) == on_sale]

    key, reverse = _sort_key(sort)
    products.sort(key=key, reverse=reverse)

    page = max(1, page)
    limit = max(1, limit)
    total = len(products)
    start = (page - 1) * limit

    return {
        "items": [p.to_card(lang) for p in products[start : start + limit]],
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if total else 0,
    }


def _haystack(product: Product) -> list[str]:
    return [
        fold(product.name.vi),
        fold(product.name.zh),
        fold(product.slug),
        fold(product.sku),
        fold(product.description.vi) if product.description else "",
    ]


def search_products(q, limit=20, lang=None) -> list[dict]:
    """Case-insensitive substring search; diacritics are ignored on both sides."""
    needle = fold((q or "").strip())
    if not needle:
        return []

    matches = [p for p in _all_products() if any(needle in field for field in _haystack(p))]
    matches.sort(key=lambda p: p.sold or 0, reverse=True)
    return [p.to_card(lang) for p in matches[:limit]]


def search_suggestions(q, lang=None) -> list[dict]:
    needle = fold((q or "").strip())
    if not needle:
        return []

    def rank(product):
        if fold(product.sku) == needle:
            return 0
        if fold(product.name.vi).startswith(needle) or fold(product.name.zh).startswith(needle):
            return 1
        return 2

    matches = [p for p in _all_products() if any(needle in field for field in _haystack(p))]
    matches.sort(key=rank)
    return [
        {"id": str(p.id), "slug": p.slug, "sku": p.sku, "name": p.name.in_language(lang), "price_sale": p.price_sale}
        for p in matches[:SUGGESTION_LIMIT]
    ]


def get_product(product_id, lang=None) -> dict:
    return current_domain.repository_for(Product).get(product_id).to_detail(lang)


def get_product_by_slug(slug, lang=None) -> dict:
    found = fetch_all(Product, slug=slug)
    if not found:
        raise ObjectNotFoundError(f"Product with slug `{slug}` does not exist")
    return found[0].to_detail(lang)


def top_selling(limit=5, lang=None) -> list[dict]:
    products = sorted(_all_products(), key=lambda p: p.sold or 0, reverse=True)
    return [p.to_card(lang) for p in products[:limit]]
