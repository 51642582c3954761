"""Pydantic request/response schemas for the storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Request bodies accept both snake_case and the
camelCase the web client sends.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shop
# ---------------------------------------------------------------------------
class VariantResponse(BaseModel):
    id: str
    sku: str
    size: str | None = None
    color: str | None = None
    appearance_id: str | None = None
    price_cents: int
    stock_quantity: int
    is_available: bool


class ProductResponse(BaseModel):
    id: str
    external_id: str
    name: str
    description: str | None = None
    image_url: str | None = None
    images: list[str] = []
    min_price_cents: int | None = None
    is_available: bool
    variants: list[VariantResponse] = []


class ProductListResponse(BaseModel):
    products: list[ProductResponse]


class CartItemSchema(RequestModel):
    variant_id: str
    quantity: int


class ShippingAddressSchema(RequestModel):
    first_name: str = ""
    last_name: str = ""
    street: str = ""
    city: str = ""
    state: str | None = None
    postal_code: str = ""
    country: str = ""
    email: str | None = None
    phone: str | None = None


class CheckoutRequest(RequestModel):
    items: list[CartItemSchema] = []
    shipping_address: ShippingAddressSchema | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "items": [{"variant_id": "3f2b...", "quantity": 2}],
                    "shipping_address": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "street": "12 Analytical Row",
                        "city": "London",
                        "postal_code": "N1 9GU",
                        "country": "GB",
                        "email": "ada@example.com",
                    },
                }
            ]
        },
    )


class CheckoutResponse(BaseModel):
    session_id: str
    url: str
    total_cents: int


class StockRequest(RequestModel):
    skus: list[str] = Field(min_length=1, max_length=100)


class StockResponse(BaseModel):
    stock: dict[str, int]
    cached_at: str


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    variant_id: str
    sku: str
    product_name: str | None = None
    quantity: int
    unit_price_cents: int


class OrderResponse(BaseModel):
    id: str
    status: str
    total_cents: int
    currency: str
    items: list[OrderItemResponse]
    tracking_number: str | None = None
    tracking_url: str | None = None
    carrier: str | None = None
    fulfillment_order_id: str | None = None
    created_at: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
class SettingsResponse(BaseModel):
    markup_percentage: float
    updated_by: str | None = None
    updated_at: str | None = None
    has_api_key: bool = False


class UpdateSettingsRequest(RequestModel):
    markup_percentage: float = Field(ge=0, le=10)


class SyncResponse(BaseModel):
    success: bool = True
    products_added: int
    products_updated: int
    products_deactivated: int
    variants_added: int
    variants_updated: int
    total_articles: int
    errors: list[str] = []


class SubmitOrderResponse(BaseModel):
    order_id: str
    fulfillment_order_id: str | None = None
    fulfillment_error: str | None = None


# ---------------------------------------------------------------------------
# Billing and account
# ---------------------------------------------------------------------------
class SubscriptionCheckoutRequest(RequestModel):
    plan: str
    success_url: str | None = None
    cancel_url: str | None = None


class SessionResponse(BaseModel):
    session_id: str
    url: str


class PortalRequest(RequestModel):
    return_url: str | None = None


class PortalResponse(BaseModel):
    url: str


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    role: str
    subscription_status: str
    subscription_plan: str | None = None


class WebhookAck(BaseModel):
    received: bool = True
    outcome: str | None = None
