"""Category tree — nesting, sibling order and drag-and-drop reordering.

A drop names the dragged category, the category it was dropped on and where:
``before`` or ``after`` the target (becoming its sibling) or ``inside`` it
(becoming its first child). Siblings at both the old and the new place are
renumbered from zero so ``sort_order`` never has gaps.
"""

from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from storefront.category.category import Category
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


class DropPosition(Enum):
    BEFORE = "before"
    INSIDE = "inside"
    AFTER = "after"


def _key(value):
    return str(value) if value else None


def _sibling_key(category):
    return (category.sort_order or 0, category.name.vi.casefold())


def descendant_ids(categories, root_id) -> set[str]:
    """Ids of every category below ``root_id``."""
    children: dict[str | None, list[str]] = {}
    for category in categories:
        children.setdefault(_key(category.parent_id), []).append(str(category.id))

    found: set[str] = set()
    pending = list(children.get(str(root_id), []))
    while pending:
        current = pending.pop()
        if current in found:
            continue
        found.add(current)
        pending.extend(children.get(current, []))
    return found


def ensure_valid_parent(categories, category_id, parent_id):
    """Reject a parent that does not exist or would put ``category_id`` inside itself."""
    if not parent_id:
        return
    if str(parent_id) not in {str(c.id) for c in categories}:
        raise ValidationError({"parent_id": ["Parent category does not exist"]})
    if category_id and (str(parent_id) == str(category_id) or str(parent_id) in descendant_ids(categories, category_id)):
        raise ValidationError({"parent_id": ["A category cannot be moved inside its own subtree"]})


def category_tree(lang=None, include_inactive=False) -> list[dict]:
    """Nested category views, each with a ``children`` list, siblings in display order.

    Shoppers get active categories only; a hidden category hides its whole
    subtree. Admins pass ``include_inactive`` to see everything.
    """
    categories = sorted(fetch_all(Category), key=_sibling_key)
    nodes = {str(c.id): {**c.to_view(lang), "children": []} for c in categories}

    roots = []
    for category in categories:
        node = nodes[str(category.id)]
        parent = nodes.get(_key(category.parent_id))
        if parent is not None:
            parent["children"].append(node)
        else:
            roots.append(node)

    if include_inactive:
        return roots

    def visible(branch):
        return [{**n, "children": visible(n["children"])} for n in branch if n["is_active"]]

    return visible(roots)


def siblings_of(categories, parent_id, exclude_id=None) -> list:
    return sorted(
        (c for c in categories if _key(c.parent_id) == _key(parent_id) and str(c.id) != str(exclude_id)),
        key=_sibling_key,
    )


def renumber(siblings, repo):
    for index, category in enumerate(siblings):
        if category.sort_order != index:
            category.reposition(index)
            repo.add(category)


@storefront.command(part_of="Category")
class ReorderCategories:
    dragged_id = Identifier(required=True)
    target_id = Identifier(required=True)
    position = String(required=True, choices=DropPosition)


@storefront.command_handler(part_of=Category)
class CategoryHierarchyHandler:
    @handle(ReorderCategories)
    def reorder(self, command):
        if str(command.dragged_id) == str(command.target_id):
            raise ValidationError({"target_id": ["A category cannot be dropped on itself"]})

        repo = current_domain.repository_for(Category)
        dragged = repo.get(command.dragged_id)
        target = repo.get(command.target_id)
        categories = fetch_all(Category)
        position = DropPosition(command.position)

        old_parent = _key(dragged.parent_id)
        new_parent = str(target.id) if position == DropPosition.INSIDE else _key(target.parent_id)
        ensure_valid_parent(categories, dragged.id, new_parent)

        siblings = siblings_of(categories, new_parent, exclude_id=dragged.id)
        if position == DropPosition.INSIDE:
            index = 0
        else:
            index = next(i for i, c in enumerate(siblings) if str(c.id) == str(target.id))
            if position == DropPosition.AFTER:
                index += 1

        dragged.move(new_parent, index)
        repo.add(dragged)
        siblings.insert(index, dragged)
        renumber(siblings, repo)

        if old_parent != new_parent:
            renumber(siblings_of(categories, old_parent, exclude_id=dragged.id), repo)

        logger.info(
            "Category reordered",
            category_id=str(dragged.id),
            parent_id=new_parent,
            sort_order=index,
        )
        return {"parent_id": new_parent, "sort_order": index}
