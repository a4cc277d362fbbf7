"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A product was added to the catalog."""

    __version__ = 1

    product_id = Identifier(required=True)
    slug = String(required=True)
    sku = String(required=True)
    name_vi = String(required=True)
    price_sale = Float(required=True)
    quantity = Integer(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON list of field names


@storefront.event(part_of="Product")
class ProductDeleted:
    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)


@storefront.event(part_of="Product")
class StockWithdrawn:
    """Stock was taken off the shelf for a new order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)


@storefront.event(part_of="Product")
class StockRestored:
    """Stock held by a cancelled or expired order went back on the shelf."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)


@storefront.event(part_of="Product")
class SoldCountAdjusted:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_sold = Integer(required=True)
    sold = Integer(required=True)


@storefront.event(part_of="Product")
class ProductTranslated:
    __version__ = 1

    product_id = Identifier(required=True)
    language = String(required=True)
    translated_parts = Text(required=True)  # JSON list, e.g. ["name", "attributes"]
