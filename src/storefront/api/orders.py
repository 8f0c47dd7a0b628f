"""Order endpoints — lookups, staff listings, lifecycle updates and reports."""

from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    OrderAnalyticsResponse,
    OrderListResponse,
    OrderResponse,
    RevenueReportResponse,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
)
from storefront.config import clamp_page
from storefront.order.lifecycle import UpdateOrderStatus, UpdatePaymentStatus
from storefront.order.order import Order
from storefront.projections.daily_sales import revenue_report, summarize

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _page_of(orders, pagination) -> OrderListResponse:
    return OrderListResponse(orders=[OrderResponse(**o.to_dict()) for o in orders], pagination=pagination)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Literal["pending", "confirmed", "shipped", "delivered", "cancelled"] | None = None,
    payment_status: Literal["pending", "paid", "failed", "refunded"] | None = None,
    email: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    sort_by: Literal["created_at", "total", "order_number", "status"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
) -> OrderListResponse:
    page, limit = clamp_page(page, limit)
    orders, pagination = current_domain.repository_for(Order).list_orders(
        page,
        limit,
        sort_by=sort_by,
        sort_order=sort_order,
        status=status,
        payment_status=payment_status,
        email=email,
        start_date=start_date,
        end_date=end_date,
    )
    return _page_of(orders, pagination)


@order_router.get("/analytics", response_model=OrderAnalyticsResponse)
async def order_analytics(start_date: datetime | None = None, end_date: datetime | None = None):
    return OrderAnalyticsResponse(**current_domain.repository_for(Order).analytics(start_date, end_date))


@order_router.get("/revenue", response_model=RevenueReportResponse)
async def revenue(start_date: date | None = None, end_date: date | None = None) -> RevenueReportResponse:
    days = revenue_report(
        start_date.isoformat() if start_date else None,
        end_date.isoformat() if end_date else None,
    )
    return RevenueReportResponse(days=days, **summarize(days))


@order_router.get("/number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(order_number: str) -> OrderResponse:
    return OrderResponse(**current_domain.repository_for(Order).get_by_number(order_number).to_dict())


@order_router.get("/customer/{email}", response_model=OrderListResponse)
async def list_customer_orders(
    email: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> OrderListResponse:
    page, limit = clamp_page(page, limit)
    orders, pagination = current_domain.repository_for(Order).list_for_customer(email, page, limit)
    return _page_of(orders, pagination)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse(**current_domain.repository_for(Order).get_order(order_id).to_dict())


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        notes=body.notes,
    )
    return OrderResponse(**current_domain.process(command, asynchronous=False))


@order_router.put("/{order_id}/payment", response_model=OrderResponse)
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> OrderResponse:
    command = UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status)
    return OrderResponse(**current_domain.process(command, asynchronous=False))
