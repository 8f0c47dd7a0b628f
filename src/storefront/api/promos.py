"""Promo code endpoints — validation for shoppers, administration and analytics for staff."""

import json
from typing import Literal

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    CreatePromoRequest,
    PromoAnalyticsResponse,
    PromoIdResponse,
    PromoListResponse,
    PromoResponse,
    PromoValidationResponse,
    StatusResponse,
    UpdatePromoRequest,
)
from storefront.config import clamp_page
from storefront.promotion.engine import validate_promo
from storefront.promotion.management import CreatePromoCode, DeletePromoCode, UpdatePromoCode
from storefront.promotion.promo_code import PromoCode

promo_router = APIRouter(prefix="/promos", tags=["promos"])


@promo_router.get("/validate/{code}", response_model=PromoValidationResponse)
async def validate_code(code: str, subtotal: float = Query(0.0, ge=0)) -> PromoValidationResponse:
    result = validate_promo(code, subtotal)
    promo = result["promo"]
    return PromoValidationResponse(
        is_valid=result["is_valid"],
        discount=result["discount"],
        promo=PromoResponse(**promo.to_dict()) if promo else None,
    )


@promo_router.get("/analytics", response_model=PromoAnalyticsResponse)
async def promo_analytics() -> PromoAnalyticsResponse:
    return PromoAnalyticsResponse(**current_domain.repository_for(PromoCode).analytics())


@promo_router.get("", response_model=PromoListResponse)
async def list_promos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_active: bool | None = None,
    discount_type: Literal["percentage", "fixed"] | None = None,
    sort_by: Literal["created_at", "code", "valid_to", "used_count", "value"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
) -> PromoListResponse:
    page, limit = clamp_page(page, limit)
    promos, pagination = current_domain.repository_for(PromoCode).list_codes(
        page,
        limit,
        is_active=is_active,
        discount_type=discount_type,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return PromoListResponse(
        promo_codes=[PromoResponse(**p.to_dict()) for p in promos],
        pagination=pagination,
    )


@promo_router.get("/{promo_id}", response_model=PromoResponse)
async def get_promo(promo_id: str) -> PromoResponse:
    promo = current_domain.repository_for(PromoCode).get_promo(promo_id)
    return PromoResponse(**promo.to_dict())


@promo_router.post("", status_code=201, response_model=PromoIdResponse)
async def create_promo(body: CreatePromoRequest) -> PromoIdResponse:
    command = CreatePromoCode(**body.model_dump())
    promo_id = current_domain.process(command, asynchronous=False)
    return PromoIdResponse(promo_id=promo_id)


@promo_router.patch("/{promo_id}", response_model=PromoResponse)
async def update_promo(promo_id: str, body: UpdatePromoRequest) -> PromoResponse:
    changes = body.model_dump(mode="json", exclude_unset=True)
    current_domain.process(UpdatePromoCode(promo_id=promo_id, changes=json.dumps(changes)), asynchronous=False)
    promo = current_domain.repository_for(PromoCode).get_promo(promo_id)
    return PromoResponse(**promo.to_dict())


@promo_router.delete("/{promo_id}", response_model=StatusResponse)
async def delete_promo(promo_id: str) -> StatusResponse:
    current_domain.process(DeletePromoCode(promo_id=promo_id), asynchronous=False)
    return StatusResponse()
