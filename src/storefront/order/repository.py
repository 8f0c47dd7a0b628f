"""Order lookups, listings and analytics."""

from collections import Counter

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import OrderNotFound
from storefront.order.order import Order, OrderStatus
from storefront.utils.clock import as_utc
from storefront.utils.queries import paginate, scan

_SORT_FIELDS = {"created_at", "total", "order_number", "status"}


@storefront.repository(part_of=Order)
class OrderRepository:
    def get_order(self, order_id) -> Order:
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise OrderNotFound({"order": [f"Order {order_id} not found"]}) from None

    def get_by_number(self, order_number) -> Order:
        order = self._dao.query.filter(order_number=order_number).all().first
        if order is None:
            raise OrderNotFound({"order": [f"Order {order_number} not found"]})
        return order

    def _filtered(self, status=None, payment_status=None, email=None, start_date=None, end_date=None):
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        if payment_status:
            query = query.filter(payment_status=payment_status)
        if email:
            query = query.filter(contact_email__contains=email.strip().lower())
        if start_date:
            query = query.filter(created_at__gte=as_utc(start_date))
        if end_date:
            query = query.filter(created_at__lte=as_utc(end_date))
        return query

    def list_orders(self, page, limit, sort_by="created_at", sort_order="desc", **filters):
        sort_field = sort_by if sort_by in _SORT_FIELDS else "created_at"
        return paginate(self._filtered(**filters), page, limit, sort_field, sort_order)

    def list_for_customer(self, email, page, limit):
        query = self._dao.query.filter(contact_email=email.strip().lower())
        return paginate(query, page, limit, "created_at", "desc")

    def analytics(self, start_date=None, end_date=None) -> dict:
        total_orders = total_items = 0
        total_revenue = 0.0
        by_status = Counter({status.value: 0 for status in OrderStatus})
        by_payment_method = Counter()

        for order in scan(self._filtered(start_date=start_date, end_date=end_date)):
            total_orders += 1
            total_revenue += order.total
            total_items += sum(item.quantity for item in order.items)
            by_status[order.status] += 1
            by_payment_method[order.payment_method] += 1

        return {
            "total_orders": total_orders,
            "total_revenue": round(total_revenue, 2),
            "average_order_value": round(total_revenue / total_orders, 2) if total_orders else 0.0,
            "total_items": total_items,
            "by_status": dict(by_status),
            "by_payment_method": dict(by_payment_method),
        }
