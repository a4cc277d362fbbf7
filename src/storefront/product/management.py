"""Product management — create, update, delete, categorize and view commands."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    slug: String(required=True, max_length=200)
    sku: String(required=True, max_length=50)
    name_vi: String(required=True, max_length=255)
    name_zh: String(max_length=255)
    description_vi: Text()
    description_zh: Text()
    images: Text()  # JSON list
    attributes: Text()  # JSON list
    category_ids: Text()  # JSON list
    price_original: Float(required=True, min_value=0.0)
    price_sale: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=0)
    hot: Boolean(default=False)
    on_sale: Boolean(default=False)


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    slug: String(max_length=200)
    sku: String(max_length=50)
    name_vi: String(max_length=255)
    name_zh: String(max_length=255)
    description_vi: Text()
    description_zh: Text()
    images: Text()
    attributes: Text()
    category_ids: Text()
    price_original: Float(min_value=0.0)
    price_sale: Float(min_value=0.0)
    quantity: Integer(min_value=0)
    hot: Boolean()
    on_sale: Boolean()


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class AssignCategories:
    product_ids: Text(required=True)  # JSON list
    category_ids: Text(required=True)  # JSON list


@storefront.command(part_of="Product")
class RecordProductView:
    product_id: Identifier(required=True)


def _json_list(raw, field_name):
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        raise ValidationError({field_name: ["Must be a JSON list"]}) from None
    if not isinstance(value, list):
        raise ValidationError({field_name: ["Must be a JSON list"]})
    return value


def _ensure_unique(repo, field_name, value, exclude_id=None):
    clash = [p for p in repo._dao.query.filter(**{field_name: value}).all().items if str(p.id) != str(exclude_id)]
    if clash:
        raise ValidationError({field_name: [f"Product {field_name} '{value}' is already in use"]})


@storefront.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        repo = current_domain.repository_for(Product)
        _ensure_unique(repo, "slug", command.slug)
        _ensure_unique(repo, "sku", command.sku)

        product = Product.create(
            slug=command.slug,
            sku=command.sku,
            name_vi=command.name_vi,
            name_zh=command.name_zh,
            description_vi=command.description_vi,
            description_zh=command.description_zh,
            images=_json_list(command.images, "images"),
            attributes=_json_list(command.attributes, "attributes"),
            category_ids=_json_list(command.category_ids, "category_ids"),
            price_original=command.price_original,
            price_sale=command.price_sale,
            quantity=command.quantity,
            hot=command.hot,
            on_sale=command.on_sale,
        )
        repo.add(product)
        logger.info("Product created", product_id=str(product.id), sku=product.sku)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        if command.slug and command.slug != product.slug:
            _ensure_unique(repo, "slug", command.slug, exclude_id=product.id)
        if command.sku and command.sku != product.sku:
            _ensure_unique(repo, "sku", command.sku, exclude_id=product.id)

        product.update_details(
            slug=command.slug,
            sku=command.sku,
            name_vi=command.name_vi,
            name_zh=command.name_zh,
            description_vi=command.description_vi,
            description_zh=command.description_zh,
            images=_json_list(command.images, "images"),
            attributes=_json_list(command.attributes, "attributes"),
            category_ids=_json_list(command.category_ids, "category_ids"),
            price_original=command.price_original,
            price_sale=command.price_sale,
            quantity=command.quantity,
            hot=command.hot,
            on_sale=command.on_sale,
        )
        repo.add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.mark_deleted()
        repo.add(product)
        repo._dao.delete(product)
        logger.info("Product deleted", product_id=str(command.product_id))

    @handle(AssignCategories)
    def assign_categories(self, command):
        repo = current_domain.repository_for(Product)
        product_ids = _json_list(command.product_ids, "product_ids") or []
        category_ids = _json_list(command.category_ids, "category_ids") or []

        updated = 0
        for product_id in product_ids:
            product = repo.get(product_id)
            product.assign_categories(category_ids)
            repo.add(product)
            updated += 1
        return updated

    @handle(RecordProductView)
    def record_view(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.record_view()
        repo.add(product)
