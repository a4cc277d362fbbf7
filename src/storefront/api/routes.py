"""FastAPI routes for the Storefront domain — catalog, cart, orders and MoMo.

Thin adapters: writes become Protean commands, reads go straight to the
read-side helpers. Admin endpoints live under ``/admin``.
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from protean.utils.globals import current_domain

from identity.auth.dependencies import current_user, optional_user, require_admin
from identity.auth.tokens import TokenClaims
from shared.queries import fetch_all
from shared.settings import get_settings
from storefront.api.schemas import (
    AddToCartRequest,
    AssignCategoriesRequest,
    AssignShipmentRequest,
    CancelOrderRequest,
    CategoryIdResponse,
    ChangeStatusRequest,
    CountResponse,
    CreateCategoryRequest,
    CreateProductRequest,
    MomoOrderResponse,
    MomoWebhookPayload,
    OrderPlacedResponse,
    OrderStatusResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ReorderCategoriesRequest,
    StatusResponse,
    TranslateRequest,
    TranslationReport,
    UpdateCartItemRequest,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from storefront.cart.management import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from storefront.cart.view import cart_view
from storefront.category.category import Category
from storefront.category.hierarchy import ReorderCategories, category_tree
from storefront.category.management import CreateCategory, DeleteCategory, UpdateCategory
from storefront.gateway import get_gateway
from storefront.order.cancellation import CancelOrder
from storefront.order.deletion import DeleteOrder
from storefront.order.expiry import ExpireReservedOrders
from storefront.order.order import CancellationActor, Order
from storefront.order.payment import RecordMomoResult
from storefront.order.placement import PlaceOrder
from storefront.order.queries import list_orders, order_detail, order_stats, orders_of
from storefront.order.shipment import AssignShipment
from storefront.order.status import ChangeOrderStatus
from storefront.order.tracking import track_order
from storefront.product.catalog import (
    get_product,
    get_product_by_slug,
    list_products,
    search_products,
    search_suggestions,
    top_selling,
)
from storefront.product.management import (
    AssignCategories,
    CreateProduct,
    DeleteProduct,
    RecordProductView,
    UpdateProduct,
)
from storefront.product.sold_sync import SyncSoldCounters
from storefront.projections.daily_sales import recent_days
from storefront.translation.pipeline import TranslateCategories, TranslateProducts
from storefront.translation.stats import translation_stats

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
momo_router = APIRouter(prefix="/momo", tags=["payments"])
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _json(value):
    if value is None:
        return None
    return json.dumps([v.model_dump() if hasattr(v, "model_dump") else v for v in value], ensure_ascii=False)


# ---------------------------------------------------------------------------
# Catalog (public)
# ---------------------------------------------------------------------------
@product_router.get("")
async def browse_products(
    category_id: str | None = None,
    hot: bool | None = None,
    on_sale: bool | None = None,
    sort: str = Query("newest", pattern="^(newest|price-asc|price-desc|-sold)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    lang: str = Query("vi", pattern="^(vi|zh)$"),
):
    return list_products(
        category_id=category_id, hot=hot, on_sale=on_sale, sort=sort, page=page, limit=limit, lang=lang
    )


@product_router.get("/search")
async def search(q: str = "", limit: int = Query(20, ge=1, le=100), lang: str = Query("vi", pattern="^(vi|zh)$")):
    return {"items": search_products(q, limit=limit, lang=lang)}


@product_router.get("/suggestions")
async def suggestions(q: str = "", lang: str = Query("vi", pattern="^(vi|zh)$")):
    return {"items": search_suggestions(q, lang=lang)}


@product_router.get("/slug/{slug}")
async def product_by_slug(slug: str, lang: str = Query("vi", pattern="^(vi|zh)$")):
    return get_product_by_slug(slug, lang=lang)


@product_router.get("/{product_id}")
async def product_detail(product_id: str, lang: str = Query("vi", pattern="^(vi|zh)$")):
    detail = get_product(product_id, lang=lang)
    current_domain.process(RecordProductView(product_id=product_id), asynchronous=False)
    return detail


@category_router.get("")
async def list_categories(lang: str = Query("vi", pattern="^(vi|zh)$")):
    categories = [c for c in fetch_all(Category) if c.is_active is not False]
    categories.sort(key=lambda c: (c.sort_order or 0, c.name.vi))
    return {"items": [c.to_view(lang) for c in categories]}


@category_router.get("/tree")
async def public_category_tree(lang: str = Query("vi", pattern="^(vi|zh)$")):
    return category_tree(lang=lang)


@category_router.get("/{category_id}")
async def category_detail(category_id: str, lang: str = Query("vi", pattern="^(vi|zh)$")):
    return current_domain.repository_for(Category).get(category_id).to_view(lang)


# ---------------------------------------------------------------------------
# Cart (signed-in users)
# ---------------------------------------------------------------------------
@cart_router.get("")
async def get_cart(lang: str = Query("vi", pattern="^(vi|zh)$"), user: TokenClaims = Depends(current_user)):
    return cart_view(user.user_id, lang=lang)


@cart_router.post("/items", status_code=201, response_model=StatusResponse)
async def add_to_cart(body: AddToCartRequest, user: TokenClaims = Depends(current_user)) -> StatusResponse:
    command = AddToCart(user_id=user.user_id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/items/{product_id}", response_model=StatusResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartItemRequest, user: TokenClaims = Depends(current_user)
) -> StatusResponse:
    command = UpdateCartItem(user_id=user.user_id, product_id=product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(product_id: str, user: TokenClaims = Depends(current_user)) -> StatusResponse:
    current_domain.process(RemoveFromCart(user_id=user.user_id, product_id=product_id), asynchronous=False)
    return StatusResponse()


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(user: TokenClaims = Depends(current_user)) -> StatusResponse:
    current_domain.process(ClearCart(user_id=user.user_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Orders (customers and guests)
# ---------------------------------------------------------------------------
def _place(body: PlaceOrderRequest, user: TokenClaims | None, payment_method: str) -> dict:
    command = PlaceOrder(
        user_id=user.user_id if user else None,
        customer_name=body.customer_name,
        phone=body.phone,
        email=body.email,
        address=body.address,
        city=body.city,
        payment_method=payment_method,
        note=body.note,
        items=json.dumps([item.model_dump() for item in body.items], ensure_ascii=False),
    )
    return current_domain.process(command, asynchronous=False)


@order_router.post("", status_code=201, response_model=OrderPlacedResponse)
async def place_order(
    body: PlaceOrderRequest, user: TokenClaims | None = Depends(optional_user)
) -> OrderPlacedResponse:
    return OrderPlacedResponse(**_place(body, user, body.payment_method))


@order_router.post("/momo", status_code=201, response_model=MomoOrderResponse)
async def place_momo_order(
    body: PlaceOrderRequest, user: TokenClaims | None = Depends(optional_user)
) -> MomoOrderResponse:
    settings = get_settings()
    placed = _place(body, user, "momo")

    # Outbound HTTP call; keep it off the event loop
    link = await run_in_threadpool(
        get_gateway().create_payment,
        order_code=placed["order_code"],
        amount=int(round(placed["total"])),
        order_info=f"Thanh toán đơn hàng #{placed['order_code']}",
        redirect_url=settings.momo_redirect_url,
        ipn_url=settings.momo_ipn_url,
    )
    if not link.success or not link.pay_url:
        # The order keeps its reservation; the expiry sweep releases it if never paid
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": "Could not create MoMo payment link", "order_code": placed["order_code"]},
        )
    return MomoOrderResponse(**placed, pay_url=link.pay_url)


@order_router.get("/track/{order_code}")
async def track(order_code: str, lang: str = Query("vi", pattern="^(vi|zh)$")):
    return track_order(order_code, lang=lang)


@order_router.get("/mine")
async def my_orders(lang: str = Query("vi", pattern="^(vi|zh)$"), user: TokenClaims = Depends(current_user)):
    return {"items": orders_of(user.user_id, lang=lang)}


def _owned_order(order_id: str, user: TokenClaims) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    if not order.is_owned_by(user.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this order")
    return order


@order_router.get("/mine/{order_id}")
async def my_order_detail(order_id: str, lang: str = Query("vi", pattern="^(vi|zh)$"), user: TokenClaims = Depends(current_user)):
    return _owned_order(order_id, user).to_dict(lang)


@order_router.post("/{order_id}/cancel", response_model=OrderStatusResponse)
async def cancel_my_order(
    order_id: str, body: CancelOrderRequest | None = None, user: TokenClaims = Depends(current_user)
) -> OrderStatusResponse:
    _owned_order(order_id, user)
    command = CancelOrder(
        order_id=order_id,
        actor=CancellationActor.CUSTOMER.value,
        user_id=user.user_id,
        reason=body.reason if body else None,
    )
    return OrderStatusResponse(status=current_domain.process(command, asynchronous=False))


# ---------------------------------------------------------------------------
# MoMo IPN webhook
# ---------------------------------------------------------------------------
@momo_router.post("/webhook", response_model=OrderStatusResponse)
async def momo_webhook(payload: MomoWebhookPayload) -> OrderStatusResponse:
    if not get_gateway().verify_callback(payload.model_dump()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature")

    command = RecordMomoResult(
        order_code=payload.orderId,
        result_code=payload.resultCode,
        trans_id=str(payload.transId) if payload.transId != "" else None,
        message=payload.message,
    )
    return OrderStatusResponse(status=current_domain.process(command, asynchronous=False))


# ---------------------------------------------------------------------------
# Admin: catalog
# ---------------------------------------------------------------------------
@admin_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest) -> ProductIdResponse:
    command = CreateProduct(
        slug=body.slug,
        sku=body.sku,
        name_vi=body.name_vi,
        name_zh=body.name_zh,
        description_vi=body.description_vi,
        description_zh=body.description_zh,
        images=_json(body.images),
        attributes=_json(body.attributes),
        category_ids=_json(body.category_ids),
        price_original=body.price_original,
        price_sale=body.price_sale,
        quantity=body.quantity,
        hot=body.hot,
        on_sale=body.on_sale,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@admin_router.put("/products/{product_id}", response_model=StatusResponse)
async def update_product(product_id: str, body: UpdateProductRequest) -> StatusResponse:
    command = UpdateProduct(
        product_id=product_id,
        slug=body.slug,
        sku=body.sku,
        name_vi=body.name_vi,
        name_zh=body.name_zh,
        description_vi=body.description_vi,
        description_zh=body.description_zh,
        images=_json(body.images),
        attributes=_json(body.attributes),
        category_ids=_json(body.category_ids),
        price_original=body.price_original,
        price_sale=body.price_sale,
        quantity=body.quantity,
        hot=body.hot,
        on_sale=body.on_sale,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.delete("/products/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str) -> StatusResponse:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@admin_router.post("/products/assign-categories", response_model=CountResponse)
async def assign_categories(body: AssignCategoriesRequest) -> CountResponse:
    command = AssignCategories(product_ids=json.dumps(body.product_ids), category_ids=json.dumps(body.category_ids))
    return CountResponse(count=current_domain.process(command, asynchronous=False))


@admin_router.post("/products/sync-sold", response_model=CountResponse)
async def sync_sold() -> CountResponse:
    return CountResponse(count=current_domain.process(SyncSoldCounters(), asynchronous=False))


@admin_router.post("/categories", status_code=201, response_model=CategoryIdResponse)
async def create_category(body: CreateCategoryRequest) -> CategoryIdResponse:
    command = CreateCategory(
        slug=body.slug,
        name_vi=body.name_vi,
        name_zh=body.name_zh,
        description=body.description,
        parent_id=body.parent_id or None,
        sort_order=body.sort_order,
        is_active=body.is_active,
    )
    return CategoryIdResponse(category_id=current_domain.process(command, asynchronous=False))


@admin_router.get("/categories/tree")
async def admin_category_tree(lang: str = Query("vi", pattern="^(vi|zh)$")):
    return category_tree(lang=lang, include_inactive=True)


@admin_router.post("/categories/reorder")
async def reorder_categories(body: ReorderCategoriesRequest):
    command = ReorderCategories(dragged_id=body.dragged_id, target_id=body.target_id, position=body.position)
    return current_domain.process(command, asynchronous=False)


@admin_router.put("/categories/{category_id}", response_model=StatusResponse)
async def update_category(category_id: str, body: UpdateCategoryRequest) -> StatusResponse:
    command = UpdateCategory(
        category_id=category_id,
        slug=body.slug,
        name_vi=body.name_vi,
        name_zh=body.name_zh,
        description=body.description,
        is_active=body.is_active,
        parent_id=body.parent_id or None,
        to_top_level=body.parent_id == "",
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.delete("/categories/{category_id}", response_model=StatusResponse)
async def delete_category(category_id: str) -> StatusResponse:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Admin: orders
# ---------------------------------------------------------------------------
@admin_router.get("/orders")
async def admin_list_orders(
    status_filter: str | None = Query(None, alias="status"),
    sort_by: str = Query("created_at", pattern="^(created_at|total|status)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    lang: str = Query("vi", pattern="^(vi|zh)$"),
):
    return {"items": list_orders(status=status_filter, sort_by=sort_by, order=order, lang=lang)}


@admin_router.get("/orders/stats")
async def admin_order_stats():
    return order_stats()


@admin_router.get("/orders/{order_id}")
async def admin_order_detail(order_id: str, lang: str = Query("vi", pattern="^(vi|zh)$")):
    return order_detail(order_id, lang=lang)


@admin_router.put("/orders/{order_id}/status", response_model=OrderStatusResponse)
async def admin_change_status(order_id: str, body: ChangeStatusRequest) -> OrderStatusResponse:
    command = ChangeOrderStatus(order_id=order_id, status=body.status, reason=body.reason)
    return OrderStatusResponse(status=current_domain.process(command, asynchronous=False))


@admin_router.put("/orders/{order_id}/shipment", response_model=StatusResponse)
async def admin_assign_shipment(order_id: str, body: AssignShipmentRequest) -> StatusResponse:
    command = AssignShipment(order_id=order_id, carrier=body.carrier, tracking_number=body.tracking_number)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.delete("/orders/{order_id}", response_model=StatusResponse)
async def admin_delete_order(order_id: str) -> StatusResponse:
    current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)
    return StatusResponse()


@admin_router.post("/orders/sweep-reservations", response_model=CountResponse)
async def admin_sweep_reservations() -> CountResponse:
    return CountResponse(count=current_domain.process(ExpireReservedOrders(), asynchronous=False))


@admin_router.get("/dashboard")
async def admin_dashboard(days: int = Query(30, ge=1, le=365), lang: str = Query("vi", pattern="^(vi|zh)$")):
    return {
        "daily_sales": recent_days(days),
        "top_products": top_selling(limit=5, lang=lang),
        "order_stats": order_stats(),
    }


# ---------------------------------------------------------------------------
# Admin: translation
# ---------------------------------------------------------------------------
def _run_batch(command):
    """Run a slow batch command (provider calls and throttling) in the worker threadpool."""
    return run_in_threadpool(current_domain.process, command, asynchronous=False)


@admin_router.post("/translate/products", response_model=TranslationReport)
async def translate_products(body: TranslateRequest | None = None) -> TranslationReport:
    body = body or TranslateRequest()
    command = TranslateProducts(target=body.target, force=body.force, delay_seconds=body.delay_seconds)
    return TranslationReport(**await _run_batch(command))


@admin_router.post("/translate/categories", response_model=TranslationReport)
async def translate_categories(body: TranslateRequest | None = None) -> TranslationReport:
    body = body or TranslateRequest()
    command = TranslateCategories(target=body.target, force=body.force, delay_seconds=body.delay_seconds)
    return TranslationReport(**await _run_batch(command))


@admin_router.get("/translate/stats")
async def admin_translation_stats(target: str = Query("zh", pattern="^(vi|zh)$")):
    return translation_stats(target)
