"""Domain events for the Category aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryCreated:
    __version__ = 1

    category_id = Identifier(required=True)
    slug = String(required=True)
    name_vi = String(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Category")
class CategoryUpdated:
    __version__ = 1

    category_id = Identifier(required=True)
    slug = String(required=True)
    name_vi = String(required=True)


@storefront.event(part_of="Category")
class CategoryTranslated:
    __version__ = 1

    category_id = Identifier(required=True)
    language = String(required=True)


@storefront.event(part_of="Category")
class CategoryDeleted:
    __version__ = 1

    category_id = Identifier(required=True)
    slug = String(required=True)


@storefront.event(part_of="Category")
class CategoryMoved:
    __version__ = 1

    category_id = Identifier(required=True)
    parent_id = Identifier()
    sort_order = Integer(required=True)
