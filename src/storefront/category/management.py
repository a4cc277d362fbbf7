"""Category management — create, update and delete commands.

Deleting a category lifts its children one level, to the deleted
category's own parent, so no category is left pointing at a missing parent.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from storefront.category.category import Category
from storefront.category.hierarchy import ensure_valid_parent, renumber, siblings_of
from storefront.domain import storefront


@storefront.command(part_of="Category")
class CreateCategory:
    slug = String(required=True, max_length=200)
    name_vi = String(required=True, max_length=255)
    name_zh = String(max_length=255)
    description = Text()
    parent_id = Identifier()
    sort_order = Integer(min_value=0)  # Appended after its siblings when omitted
    is_active = Boolean(default=True)


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id = Identifier(required=True)
    slug = String(max_length=200)
    name_vi = String(max_length=255)
    name_zh = String(max_length=255)
    description = Text()
    is_active = Boolean()
    parent_id = Identifier()
    to_top_level = Boolean(default=False)


@storefront.command(part_of="Category")
class DeleteCategory:
    category_id = Identifier(required=True)


def _ensure_slug_available(repo, slug, exclude_id=None):
    clash = [c for c in repo._dao.query.filter(slug=slug).all().items if str(c.id) != str(exclude_id)]
    if clash:
        raise ValidationError({"slug": [f"Category slug '{slug}' is already in use"]})


def _reparent(repo, category, parent_id):
    """Move ``category`` to the end of ``parent_id``'s children, closing the gap it leaves."""
    old_parent = str(category.parent_id) if category.parent_id else None
    if parent_id == old_parent:
        return

    categories = fetch_all(Category)
    ensure_valid_parent(categories, category.id, parent_id)
    category.move(parent_id, len(siblings_of(categories, parent_id, exclude_id=category.id)))
    renumber(siblings_of(categories, old_parent, exclude_id=category.id), repo)


@storefront.command_handler(part_of=Category)
class CategoryManagementHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        _ensure_slug_available(repo, command.slug)
        categories = fetch_all(Category)
        ensure_valid_parent(categories, None, command.parent_id)

        sort_order = command.sort_order
        if sort_order is None:
            sort_order = len(siblings_of(categories, command.parent_id))

        category = Category.create(
            slug=command.slug,
            name_vi=command.name_vi,
            name_zh=command.name_zh,
            description=command.description,
            parent_id=command.parent_id,
            sort_order=sort_order,
            is_active=command.is_active,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        if command.slug and command.slug != category.slug:
            _ensure_slug_available(repo, command.slug, exclude_id=category.id)

        category.update_details(
            slug=command.slug,
            name_vi=command.name_vi,
            name_zh=command.name_zh,
            description=command.description,
            is_active=command.is_active,
        )

        if command.to_top_level:
            _reparent(repo, category, None)
        elif command.parent_id:
            _reparent(repo, category, str(command.parent_id))
        repo.add(category)

    @handle(DeleteCategory)
    def delete_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)

        categories = fetch_all(Category)
        lifted = siblings_of(categories, category.parent_id, exclude_id=category.id)
        for child in siblings_of(categories, category.id):
            child.move(category.parent_id, len(lifted))
            lifted.append(child)
            repo.add(child)

        category.mark_deleted()
        repo.add(category)
        repo._dao.delete(category)
        renumber(lifted, repo)
