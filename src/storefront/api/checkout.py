"""Checkout endpoints — commit, pre-flight validation and price preview."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    CheckoutRequest,
    CheckoutValidationRequest,
    CheckoutValidationResponse,
    OrderResponse,
    PromoResponse,
    TotalsRequest,
    TotalsResponse,
)
from storefront.checkout.placement import PlaceOrder
from storefront.checkout.review import preview_totals, validate_checkout
from storefront.order.order import Order

checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: CheckoutRequest) -> OrderResponse:
    command = PlaceOrder(
        cart_token=body.cart_token,
        customer=json.dumps(body.customer.model_dump()),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        promo_code=body.promo_code,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get_order(order_id)
    return OrderResponse(**order.to_dict())


@checkout_router.post("/validate", response_model=CheckoutValidationResponse)
async def validate(body: CheckoutValidationRequest) -> CheckoutValidationResponse:
    return CheckoutValidationResponse(**validate_checkout(body.cart_token, body.promo_code))


@checkout_router.post("/calculate", response_model=TotalsResponse)
async def calculate_totals(body: TotalsRequest) -> TotalsResponse:
    totals = preview_totals(body.cart_token, body.promo_code)
    promo = totals.pop("promo")
    return TotalsResponse(**totals, promo=PromoResponse(**promo.to_dict()) if promo else None)
