"""Product aggregate — a sellable piece of furniture and its stock counters.

``quantity`` is the stock still on the shelf: it drops when an order is
placed and comes back when that order is cancelled. ``sold`` counts units in
orders the shop has confirmed; it is only ever moved by order status changes
(or rebuilt wholesale by ``SyncSoldCounters``).
"""

import json
import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.product.events import (
    ProductCreated,
    ProductDeleted,
    ProductTranslated,
    ProductUpdated,
    SoldCountAdjusted,
    StockRestored,
    StockWithdrawn,
)
from storefront.shared.localized import LocalizedText, as_pair, localize

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# Fields a partial update may touch, mapped to how they are stored
_SCALAR_FIELDS = ("slug", "sku", "price_original", "price_sale", "quantity", "hot", "on_sale")


def _loads(raw, default):
    if not raw:
        return default
    return json.loads(raw) if isinstance(raw, str) else raw


@storefront.aggregate
class Product:
    slug: String(required=True, max_length=200)
    sku: String(required=True, max_length=50)
    name: ValueObject(LocalizedText, required=True)
    description: ValueObject(LocalizedText)
    images: Text()  # JSON list of image URLs
    attributes: Text()  # JSON list of {name: {vi, zh}, options: [{label: {vi, zh}, value, image, is_default}]}
    category_ids: Text()  # JSON list of category ids
    price_original: Float(required=True, min_value=0.0)
    price_sale: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=0)
    sold: Integer(default=0, min_value=0)
    views: Integer(default=0, min_value=0)
    hot: Boolean(default=False)
    on_sale: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError({"slug": ["Slug must contain only lowercase letters, digits and single hyphens"]})

    @invariant.post
    def sale_price_cannot_exceed_original(self):
        if self.price_sale is not None and self.price_original is not None and self.price_sale > self.price_original:
            raise ValidationError({"price_sale": ["Sale price cannot be higher than the original price"]})

    @invariant.post
    def attributes_must_be_well_formed(self):
        if not self.attributes:
            return
        try:
            attributes = json.loads(self.attributes)
        except (json.JSONDecodeError, TypeError):
            raise ValidationError({"attributes": ["Attributes must be valid JSON"]}) from None

        if not isinstance(attributes, list):
            raise ValidationError({"attributes": ["Attributes must be a JSON list"]})
        for attribute in attributes:
            name = attribute.get("name") if isinstance(attribute, dict) else None
            if not isinstance(name, dict) or not name.get("vi"):
                raise ValidationError({"attributes": ["Every attribute needs a Vietnamese name"]})
            for option in attribute.get("options", []):
                label = option.get("label") if isinstance(option, dict) else None
                if not isinstance(label, dict) or not label.get("vi") or not option.get("value"):
                    raise ValidationError({"attributes": [f"Option of '{name['vi']}' needs a label and a value"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        slug,
        sku,
        name_vi,
        price_original,
        price_sale,
        quantity,
        name_zh=None,
        description_vi=None,
        description_zh=None,
        images=None,
        attributes=None,
        category_ids=None,
        hot=False,
        on_sale=False,
    ):
        now = datetime.now(UTC)
        product = cls(
            slug=slug,
            sku=sku,
            name=LocalizedText(vi=name_vi, zh=name_zh or ""),
            description=LocalizedText(vi=description_vi, zh=description_zh or "") if description_vi else None,
            images=json.dumps(list(images or [])),
            attributes=json.dumps(list(attributes or [])),
            category_ids=json.dumps([str(c) for c in category_ids or []]),
            price_original=price_original,
            price_sale=price_sale,
            quantity=quantity,
            sold=0,
            views=0,
            hot=bool(hot),
            on_sale=bool(on_sale),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                slug=slug,
                sku=sku,
                name_vi=name_vi,
                price_sale=price_sale,
                quantity=quantity,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Convenience accessors
    # -------------------------------------------------------------------
    @property
    def image_list(self) -> list[str]:
        return _loads(self.images, [])

    @property
    def attribute_list(self) -> list[dict]:
        return _loads(self.attributes, [])

    @property
    def category_list(self) -> list[str]:
        return _loads(self.category_ids, [])

    def name_in(self, lang=None) -> str:
        return self.name.in_language(lang)

    # -------------------------------------------------------------------
    # Catalog maintenance
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply a partial update; keys left out (or None) keep their value."""
        changed = []

        for field_name in _SCALAR_FIELDS:
            value = changes.get(field_name)
            if value is not None and value != getattr(self, field_name):
                setattr(self, field_name, value)
                changed.append(field_name)

        if changes.get("name_vi") is not None or changes.get("name_zh") is not None:
            self.name = LocalizedText(
                vi=changes.get("name_vi") or self.name.vi,
                zh=changes.get("name_zh") if changes.get("name_zh") is not None else (self.name.zh or ""),
            )
            changed.append("name")

        if changes.get("description_vi") is not None:
            current_zh = self.description.zh if self.description else ""
            self.description = LocalizedText(
                vi=changes["description_vi"],
                zh=changes.get("description_zh") if changes.get("description_zh") is not None else (current_zh or ""),
            )
            changed.append("description")

        for field_name in ("images", "attributes", "category_ids"):
            value = changes.get(field_name)
            if value is not None:
                setattr(self, field_name, json.dumps(list(value)))
                changed.append(field_name)

        if not changed:
            return

        self.updated_at = datetime.now(UTC)
        self.raise_(ProductUpdated(product_id=str(self.id), changed_fields=json.dumps(changed)))

    def assign_categories(self, category_ids):
        self.update_details(category_ids=[str(c) for c in category_ids])

    def record_view(self):
        self.views = (self.views or 0) + 1

    def mark_deleted(self):
        self.raise_(ProductDeleted(product_id=str(self.id), sku=self.sku))

    # -------------------------------------------------------------------
    # Stock and sales counters
    # -------------------------------------------------------------------
    def withdraw_stock(self, quantity):
        """Take ``quantity`` units off the shelf for an order being placed."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > self.quantity:
            raise ValidationError(
                {"quantity": [f'Product "{self.name.vi}" has only {self.quantity} left in stock']}
            )

        self.quantity -= quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(StockWithdrawn(product_id=str(self.id), quantity=quantity, remaining=self.quantity))

    def restock(self, quantity):
        """Return ``quantity`` units held by a cancelled order."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        self.quantity += quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(StockRestored(product_id=str(self.id), quantity=quantity, remaining=self.quantity))

    def record_sale(self, quantity):
        self._set_sold((self.sold or 0) + quantity)

    def reverse_sale(self, quantity):
        self._set_sold(max(0, (self.sold or 0) - quantity))

    def reset_sold(self, total):
        self._set_sold(max(0, total))

    def _set_sold(self, value):
        previous = self.sold or 0
        if value == previous:
            return
        self.sold = value
        self.updated_at = datetime.now(UTC)
        self.raise_(SoldCountAdjusted(product_id=str(self.id), previous_sold=previous, sold=value))

    # -------------------------------------------------------------------
    # Multilingual content
    # -------------------------------------------------------------------
    def resolve_attributes(self, selected):
        """Turn a checkout selection into multilingual name/value pairs.

        ``selected`` maps a Vietnamese attribute name to the chosen option's
        value (or its Vietnamese label), e.g. ``{"Màu sắc": "do"}``. The result
        is stored on the order line so tracking can show it in any language
        even if the product changes later.
        """
        resolved = []
        definitions = {attr["name"]["vi"]: attr for attr in self.attribute_list}

        for key, chosen in (selected or {}).items():
            chosen = str(chosen)
            definition = definitions.get(key)
            if definition is None:
                resolved.append({"name": {"vi": key, "zh": ""}, "value": {"vi": chosen, "zh": chosen}})
                continue

            option = next(
                (
                    o
                    for o in definition.get("options", [])
                    if str(o.get("value")) == chosen or as_pair(o.get("label"))["vi"] == chosen
                ),
                None,
            )
            value = as_pair(option["label"]) if option else {"vi": chosen, "zh": chosen}
            resolved.append({"name": as_pair(definition["name"]), "value": value})

        return resolved

    def apply_translation(self, lang, name=None, description=None, attributes=None):
        """Store machine-translated text for ``lang``; only the parts given are written.

        New values are built before any is assigned, so a rejected translation
        leaves the product unchanged.
        """
        changes = {}
        if name is not None:
            changes["name"] = self.name.with_translation(lang, name)
        if description is not None and self.description is not None:
            changes["description"] = self.description.with_translation(lang, description)
        if attributes is not None:
            changes["attributes"] = json.dumps(attributes)

        if not changes:
            return

        for field_name, value in changes.items():
            setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductTranslated(product_id=str(self.id), language=lang, translated_parts=json.dumps(list(changes)))
        )

    def to_card(self, lang=None) -> dict:
        images = self.image_list
        return {
            "id": str(self.id),
            "slug": self.slug,
            "sku": self.sku,
            "name": self.name.in_language(lang),
            "price_original": self.price_original,
            "price_sale": self.price_sale,
            "image": images[0] if images else None,
            "hot": bool(self.hot),
            "on_sale": bool(self.on_sale),
            "sold": self.sold or 0,
            "in_stock": (self.quantity or 0) > 0,
        }

    def to_detail(self, lang=None) -> dict:
        return {
            **self.to_card(lang),
            "name_i18n": self.name.to_dict(),
            "description": self.description.in_language(lang) if self.description else "",
            "images": self.image_list,
            "attributes": [
                {
                    "name": localize(attr["name"], lang),
                    "name_i18n": as_pair(attr["name"]),
                    "options": [
                        {
                            "label": localize(option["label"], lang),
                            "value": option["value"],
                            "image": option.get("image"),
                            "is_default": bool(option.get("is_default")),
                        }
                        for option in attr.get("options", [])
                    ],
                }
                for attr in self.attribute_list
            ],
            "category_ids": self.category_list,
            "quantity": self.quantity,
            "views": self.views or 0,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
