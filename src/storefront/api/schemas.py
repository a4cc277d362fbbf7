"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LocalizedTextSchema(BaseModel):
    vi: str = Field(..., min_length=1)
    zh: str = ""


class AttributeOptionSchema(BaseModel):
    label: LocalizedTextSchema
    value: str
    image: str | None = None
    is_default: bool = False


class AttributeSchema(BaseModel):
    name: LocalizedTextSchema
    options: list[AttributeOptionSchema] = []


class OrderItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    selected_attributes: dict[str, str] = {}


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "slug": "ghe-van-phong-lung-luoi",
                    "sku": "GVP-001",
                    "name_vi": "Ghế văn phòng lưng lưới",
                    "price_original": 1850000,
                    "price_sale": 1590000,
                    "quantity": 25,
                    "images": ["https://cdn.example.com/ghe-001.jpg"],
                    "attributes": [
                        {
                            "name": {"vi": "Màu sắc"},
                            "options": [{"label": {"vi": "Đen"}, "value": "den", "is_default": True}],
                        }
                    ],
                }
            ]
        }
    }

    slug: str = Field(..., max_length=200)
    sku: str = Field(..., max_length=50)
    name_vi: str = Field(..., max_length=255)
    name_zh: str | None = Field(None, max_length=255)
    description_vi: str | None = None
    description_zh: str | None = None
    images: list[str] = []
    attributes: list[AttributeSchema] = []
    category_ids: list[str] = []
    price_original: float = Field(..., ge=0)
    price_sale: float = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    hot: bool = False
    on_sale: bool = False


class UpdateProductRequest(BaseModel):
    slug: str | None = Field(None, max_length=200)
    sku: str | None = Field(None, max_length=50)
    name_vi: str | None = Field(None, max_length=255)
    name_zh: str | None = Field(None, max_length=255)
    description_vi: str | None = None
    description_zh: str | None = None
    images: list[str] | None = None
    attributes: list[AttributeSchema] | None = None
    category_ids: list[str] | None = None
    price_original: float | None = Field(None, ge=0)
    price_sale: float | None = Field(None, ge=0)
    quantity: int | None = Field(None, ge=0)
    hot: bool | None = None
    on_sale: bool | None = None


class AssignCategoriesRequest(BaseModel):
    product_ids: list[str] = Field(..., min_length=1)
    category_ids: list[str]


class CreateCategoryRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"slug": "ghe-van-phong", "name_vi": "Ghế văn phòng"}]}}

    slug: str = Field(..., max_length=200)
    name_vi: str = Field(..., max_length=255)
    name_zh: str | None = Field(None, max_length=255)
    description: str | None = None
    parent_id: str | None = None
    sort_order: int | None = Field(None, ge=0)
    is_active: bool = True


class UpdateCategoryRequest(BaseModel):
    slug: str | None = Field(None, max_length=200)
    name_vi: str | None = Field(None, max_length=255)
    name_zh: str | None = Field(None, max_length=255)
    description: str | None = None
    is_active: bool | None = None
    parent_id: str | None = Field(None, description="Empty string moves the category to the top level")


class ReorderCategoriesRequest(BaseModel):
    model_config = {
        "json_schema_extra": {"examples": [{"dragged_id": "cat-ghe", "target_id": "cat-ban", "position": "after"}]}
    }

    dragged_id: str
    target_id: str
    position: str = Field(..., pattern="^(before|inside|after)$")


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Trần Văn Minh",
                    "phone": "0912345678",
                    "email": "minh.tran@example.com",
                    "address": "12 Nguyễn Huệ",
                    "city": "TP. Hồ Chí Minh",
                    "payment_method": "cod",
                    "items": [{"product_id": "prod-001", "quantity": 2, "selected_attributes": {"Màu sắc": "den"}}],
                }
            ]
        }
    }

    customer_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=8, max_length=20)
    email: str | None = Field(None, max_length=254)
    address: str = Field(..., min_length=1, max_length=400)
    city: str | None = Field(None, max_length=100)
    payment_method: str = Field("cod", pattern="^(cod|bank|momo)$")
    note: str | None = None
    items: list[OrderItemSchema] = Field(..., min_length=1)


class ChangeStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(Pending|Confirmed|Shipping|Completed|Cancelled)$")
    reason: str | None = Field(None, max_length=500)


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class AssignShipmentRequest(BaseModel):
    carrier: str = Field(..., max_length=100)
    tracking_number: str = Field(..., max_length=255)


class MomoWebhookPayload(BaseModel):
    """MoMo IPN body. Only the fields we act on are typed; the rest are kept for signature checks."""

    model_config = ConfigDict(extra="allow")

    partnerCode: str = ""
    orderId: str
    requestId: str = ""
    amount: int | str = 0
    orderInfo: str = ""
    orderType: str = ""
    transId: int | str = ""
    resultCode: int
    message: str = ""
    payType: str = ""
    responseTime: int | str = ""
    extraData: str = ""
    signature: str = ""


class TranslateRequest(BaseModel):
    target: str = Field("zh", pattern="^(vi|zh)$")
    force: bool = False
    delay_seconds: float | None = Field(None, ge=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductIdResponse(BaseModel):
    product_id: str


class CategoryIdResponse(BaseModel):
    category_id: str


class OrderPlacedResponse(BaseModel):
    order_id: str
    order_code: str
    total: float


class MomoOrderResponse(OrderPlacedResponse):
    pay_url: str


class OrderStatusResponse(BaseModel):
    status: str


class CountResponse(BaseModel):
    count: int


class TranslationReport(BaseModel):
    translated: int
    failed: int
    total: int
    errors: list[dict] = []


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"
