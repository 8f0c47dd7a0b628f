"""Daily sales projection — revenue report keyed by order date.

Counts every placed order and the value of paid orders for the day the
order was placed (YYYY-MM-DD). A refund takes the order back out of that
day's paid revenue.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, PaymentStatusChanged
from storefront.order.order import Order, PaymentStatus
from storefront.utils.queries import scan


@storefront.projection
class DailySales:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_placed = Integer(default=0)
    gross_sales = Float(default=0.0)
    paid_orders = Integer(default=0)
    revenue = Float(default=0.0)
    refunds = Float(default=0.0)


def _get_or_create(date_key):
    repo = current_domain.repository_for(DailySales)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailySales(
            date=date_key,
            orders_placed=0,
            gross_sales=0.0,
            paid_orders=0,
            revenue=0.0,
            refunds=0.0,
        )


@storefront.projector(projector_for=DailySales, aggregates=[Order])
class DailySalesProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())
        record.orders_placed = (record.orders_placed or 0) + 1
        record.gross_sales = round((record.gross_sales or 0.0) + event.total, 2)
        current_domain.repository_for(DailySales).add(record)

    @on(PaymentStatusChanged)
    def on_payment_status_changed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())

        if event.new_status == PaymentStatus.PAID.value:
            record.paid_orders = (record.paid_orders or 0) + 1
            record.revenue = round((record.revenue or 0.0) + event.total, 2)
        elif event.new_status == PaymentStatus.REFUNDED.value:
            record.paid_orders = max((record.paid_orders or 0) - 1, 0)
            record.revenue = round((record.revenue or 0.0) - event.total, 2)
            record.refunds = round((record.refunds or 0.0) + event.total, 2)
        else:
            return

        current_domain.repository_for(DailySales).add(record)


def revenue_report(start_date=None, end_date=None) -> list[dict]:
    """Per-day paid revenue, oldest first. Dates are ``YYYY-MM-DD`` strings."""
    query = current_domain.repository_for(DailySales)._dao.query
    if start_date:
        query = query.filter(date__gte=start_date)
    if end_date:
        query = query.filter(date__lte=end_date)

    return [
        {
            "date": record.date,
            "revenue": record.revenue,
            "order_count": record.paid_orders,
            "orders_placed": record.orders_placed,
            "refunds": record.refunds,
        }
        for record in sorted(scan(query), key=lambda r: r.date)
    ]


def summarize(days) -> dict:
    """Totals across a revenue report: paid revenue, paid orders and their average value."""
    total_revenue = round(sum(day["revenue"] for day in days), 2)
    order_count = sum(day["order_count"] for day in days)
    return {
        "total_revenue": total_revenue,
        "order_count": order_count,
        "average_order_value": round(total_revenue / order_count, 2) if order_count else 0.0,
    }
