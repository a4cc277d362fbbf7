"""Catalog translation pipeline — fill the Chinese half of multilingual fields.

Walks products (or categories) that still lack a translation, asks the
configured Translator for each missing piece and stores the result. Google's
free endpoint throttles aggressively, so the pipeline pauses between records.
A failure on one record is collected and the run moves on.
"""

import time

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, String
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from shared.settings import get_settings
from storefront.category.category import Category
from storefront.domain import storefront
from storefront.product.product import Product
from storefront.shared.localized import as_pair
from storefront.translation.translator import TranslationError, get_translator

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class TranslateProducts:
    source = String(default="vi", max_length=5)
    target = String(default="zh", max_length=5)
    force = Boolean(default=False)
    delay_seconds = Float()  # Defaults to the configured translation delay


@storefront.command(part_of="Category")
class TranslateCategories:
    source = String(default="vi", max_length=5)
    target = String(default="zh", max_length=5)
    force = Boolean(default=False)
    delay_seconds = Float()


def _needs_translation(text_value, target, force) -> bool:
    return force or not getattr(text_value, target, None)


def _translate_attributes(product, translator, source, target, force):
    """Return the attribute list with missing ``target`` names and labels filled in, or None if untouched."""
    attributes = product.attribute_list
    changed = False

    for attribute in attributes:
        name = as_pair(attribute["name"])
        if force or not name.get(target):
            name[target] = translator.translate(name[source], source, target)
            changed = True
        attribute["name"] = name

        for option in attribute.get("options", []):
            label = as_pair(option["label"])
            if force or not label.get(target):
                label[target] = translator.translate(label[source], source, target)
                changed = True
            option["label"] = label

    return attributes if changed else None


def _run(records, translate_one, delay, kind) -> dict:
    report = {"translated": 0, "failed": 0, "total": len(records), "errors": []}

    for index, record in enumerate(records):
        try:
            translate_one(record)
            report["translated"] += 1
        except (TranslationError, ValidationError) as exc:
            error = exc.messages if isinstance(exc, ValidationError) else str(exc)
            report["failed"] += 1
            report["errors"].append({"id": str(record.id), "error": str(error)})
            logger.warning(f"Failed to translate {kind}", record_id=str(record.id), error=str(error))

        if delay and index < len(records) - 1:
            time.sleep(delay)

    logger.info(f"{kind.capitalize()} translation complete", **{k: v for k, v in report.items() if k != "errors"})
    return report


def _delay(command) -> float:
    return command.delay_seconds if command.delay_seconds is not None else get_settings().translation_delay_seconds


@storefront.command_handler(part_of=Product)
class TranslateProductsHandler:
    @handle(TranslateProducts)
    def translate_products(self, command):
        source, target, force = command.source or "vi", command.target or "zh", bool(command.force)
        translator = get_translator()
        repo = current_domain.repository_for(Product)

        products = [p for p in fetch_all(Product) if _needs_translation(p.name, target, force)]

        def translate_one(product):
            name = translator.translate(product.name.vi, source, target)
            description = None
            if product.description is not None and _needs_translation(product.description, target, force):
                description = translator.translate(product.description.vi, source, target)
            attributes = _translate_attributes(product, translator, source, target, force)

            product.apply_translation(target, name=name, description=description, attributes=attributes)
            repo.add(product)

        return _run(products, translate_one, _delay(command), "product")


@storefront.command_handler(part_of=Category)
class TranslateCategoriesHandler:
    @handle(TranslateCategories)
    def translate_categories(self, command):
        source, target, force = command.source or "vi", command.target or "zh", bool(command.force)
        translator = get_translator()
        repo = current_domain.repository_for(Category)

        categories = [c for c in fetch_all(Category) if _needs_translation(c.name, target, force)]

        def translate_one(category):
            category.apply_translation(target, translator.translate(category.name.vi, source, target))
            repo.add(category)

        return _run(categories, translate_one, _delay(command), "category")
