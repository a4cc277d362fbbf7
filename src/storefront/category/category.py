"""Category aggregate — a named shelf of products ("Ghế văn phòng", "Bàn họp").

Categories form a tree through ``parent_id``; siblings are ordered by
``sort_order`` and then by Vietnamese name. Inactive categories stay in the
admin tree but are hidden from shoppers.
"""

import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text, ValueObject

from storefront.category.events import (
    CategoryCreated,
    CategoryDeleted,
    CategoryMoved,
    CategoryTranslated,
    CategoryUpdated,
)
from storefront.domain import storefront
from storefront.shared.localized import LocalizedText

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


@storefront.aggregate
class Category:
    slug: String(required=True, max_length=200)
    name: ValueObject(LocalizedText, required=True)
    description: Text()
    parent_id: Identifier()
    sort_order: Integer(default=0, min_value=0)
    is_active: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError({"slug": ["Slug must contain only lowercase letters, digits and single hyphens"]})

    @invariant.post
    def cannot_be_its_own_parent(self):
        if self.parent_id and str(self.parent_id) == str(self.id):
            raise ValidationError({"parent_id": ["A category cannot be its own parent"]})

    @classmethod
    def create(cls, slug, name_vi, name_zh=None, description=None, parent_id=None, sort_order=0, is_active=True):
        now = datetime.now(UTC)
        category = cls(
            slug=slug,
            name=LocalizedText(vi=name_vi, zh=name_zh or ""),
            description=description,
            parent_id=parent_id or None,
            sort_order=sort_order or 0,
            is_active=True if is_active is None else is_active,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=str(category.id),
                slug=slug,
                name_vi=name_vi,
                created_at=now,
            )
        )
        return category

    def update_details(self, slug=None, name_vi=None, name_zh=None, description=None, is_active=None):
        if slug is not None:
            self.slug = slug
        if name_vi is not None or name_zh is not None:
            self.name = LocalizedText(
                vi=name_vi if name_vi is not None else self.name.vi,
                zh=name_zh if name_zh is not None else (self.name.zh or ""),
            )
        if description is not None:
            self.description = description
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryUpdated(
                category_id=str(self.id),
                slug=self.slug,
                name_vi=self.name.vi,
            )
        )

    def move(self, parent_id, sort_order):
        """Place the category under ``parent_id`` (``None`` for the top level) at ``sort_order``."""
        self.parent_id = parent_id or None
        self.sort_order = sort_order
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CategoryMoved(
                category_id=str(self.id),
                parent_id=str(self.parent_id) if self.parent_id else None,
                sort_order=sort_order,
            )
        )

    def reposition(self, sort_order):
        self.sort_order = sort_order

    def apply_translation(self, lang, name):
        self.name = self.name.with_translation(lang, name)
        self.updated_at = datetime.now(UTC)
        self.raise_(CategoryTranslated(category_id=str(self.id), language=lang))

    def mark_deleted(self):
        self.raise_(CategoryDeleted(category_id=str(self.id), slug=self.slug))

    def to_view(self, lang=None) -> dict:
        return {
            "id": str(self.id),
            "slug": self.slug,
            "name": self.name.in_language(lang),
            "name_i18n": self.name.to_dict(),
            "description": self.description or "",
            "parent_id": str(self.parent_id) if self.parent_id else None,
            "sort_order": self.sort_order or 0,
            "is_active": self.is_active is not False,
        }
