"""Cart endpoints. The cart token in the path is the shopper's only credential."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    ApplyPromoRequest,
    CartResponse,
    CreateCartRequest,
    UpdateCartItemRequest,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, RemoveCartItem, UpdateCartItemQuantity
from storefront.cart.management import ClearCart, CreateOrGetCart
from storefront.cart.promos import ApplyPromoToCart, RemovePromoFromCart
from storefront.catalog.product import Product

cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _with_live_product_data(snapshot):
    """Annotate each line with whether its product is still active and the variant's live stock."""
    repo = current_domain.repository_for(Product)
    products = {}
    for line in snapshot["items"]:
        product_id = line["product_id"]
        if product_id not in products:
            products[product_id] = repo.find(product_id)
        product = products[product_id]
        variant = product.find_variant(line["variant_id"]) if product else None
        line["is_active"] = bool(product and product.is_active)
        line["stock"] = variant.stock if variant else 0
    return snapshot


@cart_router.post("", status_code=201, response_model=CartResponse)
async def create_or_get_cart(body: CreateCartRequest | None = None) -> CartResponse:
    command = CreateOrGetCart(token=body.token if body else None)
    snapshot = current_domain.process(command, asynchronous=False)
    return CartResponse(**snapshot)


@cart_router.get("/{token}", response_model=CartResponse)
async def get_cart(token: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get_active_cart(token)
    return CartResponse(**_with_live_product_data(cart.snapshot()))


@cart_router.post("/{token}/items", response_model=CartResponse)
async def add_item(token: str, body: AddToCartRequest) -> CartResponse:
    command = AddToCart(
        token=token,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    return CartResponse(**current_domain.process(command, asynchronous=False))


@cart_router.put("/{token}/items/{product_id}/{variant_id}", response_model=CartResponse)
async def update_item_quantity(token: str, product_id: str, variant_id: str, body: UpdateCartItemRequest) -> CartResponse:
    command = UpdateCartItemQuantity(
        token=token,
        product_id=product_id,
        variant_id=variant_id,
        quantity=body.quantity,
    )
    return CartResponse(**current_domain.process(command, asynchronous=False))


@cart_router.delete("/{token}/items/{product_id}/{variant_id}", response_model=CartResponse)
async def remove_item(token: str, product_id: str, variant_id: str) -> CartResponse:
    command = RemoveCartItem(token=token, product_id=product_id, variant_id=variant_id)
    return CartResponse(**current_domain.process(command, asynchronous=False))


@cart_router.delete("/{token}", response_model=CartResponse)
async def clear_cart(token: str) -> CartResponse:
    return CartResponse(**current_domain.process(ClearCart(token=token), asynchronous=False))


@cart_router.post("/{token}/promo", response_model=CartResponse)
async def apply_promo(token: str, body: ApplyPromoRequest) -> CartResponse:
    command = ApplyPromoToCart(token=token, code=body.code)
    return CartResponse(**current_domain.process(command, asynchronous=False))


@cart_router.delete("/{token}/promo", response_model=CartResponse)
async def remove_promo(token: str) -> CartResponse:
    command = RemovePromoFromCart(token=token)
    return CartResponse(**current_domain.process(command, asynchronous=False))
