"""Catalog endpoints — browsing for shoppers, maintenance for staff."""

import json
from typing import Literal

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    CreateProductRequest,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    RestockRequest,
    StatusResponse,
    UpdateProductRequest,
    VariantIdResponse,
    VariantSchema,
)
from storefront.catalog.management import (
    ActivateProduct,
    AddVariant,
    CreateProduct,
    DeactivateProduct,
    RestockVariant,
    UpdateProductDetails,
)
from storefront.catalog.product import Product
from storefront.config import clamp_page

catalog_router = APIRouter(prefix="/catalog", tags=["catalog"])


def _listing(**criteria) -> ProductListResponse:
    page, limit = clamp_page(criteria.pop("page"), criteria.pop("limit"))
    products, pagination = current_domain.repository_for(Product).list_active(page, limit, **criteria)
    return ProductListResponse(products=[p.to_summary() for p in products], pagination=pagination)


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------
@catalog_router.get("/products", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: str | None = None,
    brand: str | None = None,
    search: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    sort_by: Literal["name", "price", "created_at"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
) -> ProductListResponse:
    return _listing(
        page=page,
        limit=limit,
        category=category,
        brand=brand,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@catalog_router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get_active(product_id)
    return ProductResponse(**product.to_dict())


@catalog_router.get("/categories", response_model=list[str])
async def list_categories() -> list[str]:
    return current_domain.repository_for(Product).categories()


@catalog_router.get("/brands", response_model=list[str])
async def list_brands() -> list[str]:
    return current_domain.repository_for(Product).brands()


@catalog_router.get("/search", response_model=ProductListResponse)
async def search_products(
    q: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> ProductListResponse:
    return _listing(page=page, limit=limit, search=q, sort_by="name", sort_order="asc")


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------
@catalog_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest) -> ProductIdResponse:
    command = CreateProduct(
        name=body.name,
        description=body.description,
        category=body.category,
        brand=body.brand,
        images=json.dumps([str(url) for url in body.images]),
        tags=json.dumps(body.tags),
        variants=json.dumps([v.model_dump() for v in body.variants]),
        is_active=body.is_active,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@catalog_router.patch("/products/{product_id}", response_model=StatusResponse)
async def update_product(product_id: str, body: UpdateProductRequest) -> StatusResponse:
    command = UpdateProductDetails(
        product_id=product_id,
        name=body.name,
        description=body.description,
        category=body.category,
        brand=body.brand,
        images=json.dumps([str(url) for url in body.images]) if body.images is not None else None,
        tags=json.dumps(body.tags) if body.tags is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalog_router.post("/products/{product_id}/variants", status_code=201, response_model=VariantIdResponse)
async def add_variant(product_id: str, body: VariantSchema) -> VariantIdResponse:
    command = AddVariant(
        product_id=product_id,
        name=body.name,
        sku=body.sku,
        price=body.price,
        stock=body.stock,
        attributes=json.dumps(body.attributes) if body.attributes else None,
    )
    variant_id = current_domain.process(command, asynchronous=False)
    return VariantIdResponse(variant_id=variant_id)


@catalog_router.post("/products/{product_id}/variants/{variant_id}/restock", response_model=StatusResponse)
async def restock_variant(product_id: str, variant_id: str, body: RestockRequest) -> StatusResponse:
    command = RestockVariant(product_id=product_id, variant_id=variant_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalog_router.put("/products/{product_id}/activate", response_model=StatusResponse)
async def activate_product(product_id: str) -> StatusResponse:
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@catalog_router.put("/products/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()
