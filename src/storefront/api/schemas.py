"""Pydantic request/response schemas for the Storefront API.

These are external contracts — separate from the internal Protean
commands they are translated into.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, model_validator

SortOrder = Literal["asc", "desc"]


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class VariantSchema(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    sku: str = Field(min_length=1, max_length=64)
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    attributes: dict[str, str] | None = None


class CreateProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    category: str = Field(min_length=1, max_length=100)
    brand: str = Field(min_length=1, max_length=100)
    images: list[HttpUrl] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    variants: list[VariantSchema] = Field(min_length=1)
    is_active: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Runner",
                    "description": "Lightweight trail running shoe",
                    "category": "Footwear",
                    "brand": "Northpeak",
                    "images": ["https://cdn.example.com/trail-runner.jpg"],
                    "tags": ["running", "outdoor"],
                    "variants": [{"name": "42 / Blue", "sku": "TR-42-BLU", "price": 89.9, "stock": 12}],
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    brand: str | None = Field(default=None, min_length=1, max_length=100)
    images: list[HttpUrl] | None = None
    tags: list[str] | None = None


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


class VariantResponse(BaseModel):
    id: str
    name: str
    sku: str
    price: float
    stock: int
    attributes: dict[str, str] = Field(default_factory=dict)


class ProductSummary(BaseModel):
    id: str
    name: str
    description: str
    category: str
    brand: str
    images: list[str]
    tags: list[str]
    is_active: bool
    min_price: float
    max_price: float
    total_stock: int
    created_at: datetime | None = None


class ProductResponse(ProductSummary):
    variants: list[VariantResponse]
    available_variants: list[VariantResponse]
    updated_at: datetime | None = None


class ProductListResponse(BaseModel):
    products: list[ProductSummary]
    pagination: Pagination


class ProductIdResponse(BaseModel):
    product_id: str


class VariantIdResponse(BaseModel):
    variant_id: str


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    token: str | None = Field(default=None, max_length=64)


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str
    quantity: int = Field(ge=1, le=100, default=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=0, le=100)


class ApplyPromoRequest(BaseModel):
    code: str = Field(min_length=1, max_length=20)


class CartItemResponse(BaseModel):
    product_id: str
    variant_id: str
    quantity: int
    price: float
    product_name: str
    variant_name: str
    sku: str
    line_total: float
    is_active: bool | None = None
    stock: int | None = None


class CartResponse(BaseModel):
    token: str
    items: list[CartItemResponse]
    subtotal: float
    discount: float
    total: float
    promo_code: str | None = None
    expires_at: datetime


# ---------------------------------------------------------------------------
# Promo codes
# ---------------------------------------------------------------------------
class CreatePromoRequest(BaseModel):
    code: str = Field(min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_-]+$")
    description: str | None = Field(default=None, max_length=200)
    discount_type: Literal["percentage", "fixed"]
    value: float = Field(gt=0)
    max_discount: float | None = Field(default=None, ge=0)
    min_order_amount: float | None = Field(default=None, ge=0)
    valid_from: datetime
    valid_to: datetime
    max_uses: int | None = Field(default=None, ge=1)
    is_active: bool = True

    @model_validator(mode="after")
    def window_is_ordered(self):
        if self.valid_to <= self.valid_from:
            raise ValueError("valid_to must be after valid_from")
        return self


class UpdatePromoRequest(BaseModel):
    description: str | None = Field(default=None, max_length=200)
    discount_type: Literal["percentage", "fixed"] | None = None
    value: float | None = Field(default=None, gt=0)
    max_discount: float | None = Field(default=None, ge=0)
    min_order_amount: float | None = Field(default=None, ge=0)
    valid_from: datetime | None = None
    valid_to: datetime | None = None
    max_uses: int | None = Field(default=None, ge=1)
    is_active: bool | None = None


class PromoResponse(BaseModel):
    id: str
    code: str
    description: str | None = None
    discount_type: str
    value: float
    max_discount: float | None = None
    min_order_amount: float | None = None
    valid_from: datetime
    valid_to: datetime
    max_uses: int | None = None
    used_count: int
    is_active: bool
    is_expired: bool
    is_exhausted: bool
    usage_percentage: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PromoListResponse(BaseModel):
    promo_codes: list[PromoResponse]
    pagination: Pagination


class PromoValidationResponse(BaseModel):
    is_valid: bool
    discount: float
    promo: PromoResponse | None = None


class PromoTypeStats(BaseModel):
    count: int
    usage: int


class PromoAnalyticsResponse(BaseModel):
    total_promo_codes: int
    active_promo_codes: int
    total_usage: int
    average_usage: float
    by_type: dict[str, PromoTypeStats]


class PromoIdResponse(BaseModel):
    promo_id: str


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CustomerSchema(BaseModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    phone: str | None = Field(default=None, max_length=20)


class AddressSchema(BaseModel):
    street: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)


class CheckoutRequest(BaseModel):
    cart_token: str
    customer: CustomerSchema
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: Literal["credit_card", "paypal", "stripe"]
    promo_code: str | None = Field(default=None, max_length=20)
    notes: str | None = Field(default=None, max_length=500)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart_token": "cart_1718000000000_k3j9x0a2b",
                    "customer": {"email": "ada@example.com", "first_name": "Ada", "last_name": "Lovelace"},
                    "shipping_address": {
                        "street": "12 Analytical Row",
                        "city": "London",
                        "state": "Greater London",
                        "zip_code": "NW1 6XE",
                        "country": "UK",
                    },
                    "payment_method": "credit_card",
                    "promo_code": "WELCOME10",
                }
            ]
        }
    }


class CheckoutValidationRequest(BaseModel):
    cart_token: str
    promo_code: str | None = None


class CheckoutValidationResponse(BaseModel):
    is_valid: bool
    errors: list[str]
    cart: CartResponse


class TotalsRequest(BaseModel):
    cart_token: str
    promo_code: str | None = None


class TotalsResponse(BaseModel):
    subtotal: float
    discount: float
    total: float
    promo: PromoResponse | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    product_id: str
    variant_id: str
    product_name: str
    variant_name: str
    sku: str
    price: float
    quantity: int
    line_total: float


class OrderResponse(BaseModel):
    id: str
    order_number: str
    cart_id: str
    customer: CustomerSchema
    shipping_address: AddressSchema
    billing_address: AddressSchema
    items: list[OrderItemResponse]
    subtotal: float
    discount: float
    total: float
    promo_code: str | None = None
    status: str
    payment_method: str
    payment_status: str
    tracking_number: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: Pagination


class UpdateOrderStatusRequest(BaseModel):
    status: Literal["pending", "confirmed", "shipped", "delivered", "cancelled"]
    tracking_number: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=500)


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: Literal["pending", "paid", "failed", "refunded"]


class OrderAnalyticsResponse(BaseModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    total_items: int
    by_status: dict[str, int]
    by_payment_method: dict[str, int]


class RevenueDay(BaseModel):
    date: str
    revenue: float
    order_count: int
    orders_placed: int
    refunds: float


class RevenueReportResponse(BaseModel):
    days: list[RevenueDay]
    total_revenue: float
    order_count: int
    average_order_value: float
