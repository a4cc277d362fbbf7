"""Translation coverage per collection."""

from shared.queries import fetch_all
from storefront.category.category import Category
from storefront.product.product import Product


def _coverage(records, target) -> dict:
    total = len(records)
    translated = sum(1 for r in records if r.name.is_translated(target))
    return {
        "total": total,
        "translated": translated,
        "pending": total - translated,
        "percentage": round(translated * 100 / total) if total else 0,
    }


def translation_stats(target="zh") -> dict:
    return {
        "products": _coverage(fetch_all(Product), target),
        "categories": _coverage(fetch_all(Category), target),
    }
