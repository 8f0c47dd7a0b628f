"""Application tests for order status updates, lookups and analytics."""

import json

import pytest
from protean.utils.globals import current_domain
from storefront.checkout.placement import PlaceOrder
from storefront.errors import InvalidTransition, OrderNotFound
from storefront.order.lifecycle import UpdateOrderStatus, UpdatePaymentStatus
from storefront.order.order import Order


@pytest.fixture()
def place_order(new_cart, make_product, add_to_cart, checkout_details):
    product = make_product(variants=[{"name": "Std", "sku": "ORD-STD", "price": 20.0, "stock": 100}])

    def _place(quantity=1, email=None, payment_method=None):
        token = new_cart()
        add_to_cart(token, product, quantity=quantity)
        customer = {**checkout_details["customer"], **({"email": email} if email else {})}
        order_id = current_domain.process(
            PlaceOrder(
                cart_token=token,
                customer=json.dumps(customer),
                shipping_address=json.dumps(checkout_details["shipping_address"]),
                payment_method=payment_method or checkout_details["payment_method"],
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Order).get(order_id)

    return _place


def _set_status(order, status, **extra):
    return current_domain.process(
        UpdateOrderStatus(order_id=order.id, status=status, **extra), asynchronous=False
    )


class TestStatusUpdates:
    def test_confirm_and_ship_with_tracking(self, place_order):
        order = place_order()
        _set_status(order, "confirmed")
        result = _set_status(order, "shipped", tracking_number="1Z999")
        assert result["status"] == "shipped"
        assert result["tracking_number"] == "1Z999"

        stored = current_domain.repository_for(Order).get(order.id)
        assert stored.status == "shipped"

    def test_illegal_transition_is_rejected(self, place_order):
        order = place_order()
        _set_status(order, "cancelled")
        with pytest.raises(InvalidTransition):
            _set_status(order, "confirmed")
        assert current_domain.repository_for(Order).get(order.id).status == "cancelled"

    def test_unknown_order(self):
        with pytest.raises(OrderNotFound):
            current_domain.process(UpdateOrderStatus(order_id="missing", status="confirmed"), asynchronous=False)

    def test_payment_status(self, place_order):
        order = place_order()
        result = current_domain.process(
            UpdatePaymentStatus(order_id=order.id, payment_status="paid"), asynchronous=False
        )
        assert result["payment_status"] == "paid"
        with pytest.raises(InvalidTransition):
            current_domain.process(
                UpdatePaymentStatus(order_id=order.id, payment_status="failed"), asynchronous=False
            )


class TestLookups:
    def test_get_by_number(self, place_order):
        order = place_order()
        repo = current_domain.repository_for(Order)
        assert repo.get_by_number(order.order_number).id == order.id
        with pytest.raises(OrderNotFound):
            repo.get_by_number("ORD-0-NONE0")

    def test_list_for_customer_ignores_case(self, place_order):
        place_order(email="grace@example.com")
        place_order(email="grace@example.com")
        place_order(email="alan@example.com")
        orders, pagination = current_domain.repository_for(Order).list_for_customer("Grace@Example.COM", 1, 10)
        assert len(orders) == 2
        assert pagination["total"] == 2

    def test_list_filters_by_status(self, place_order):
        confirmed = place_order()
        place_order()
        _set_status(confirmed, "confirmed")
        orders, _ = current_domain.repository_for(Order).list_orders(page=1, limit=10, status="confirmed")
        assert [o.id for o in orders] == [confirmed.id]

    def test_list_filters_by_email_fragment(self, place_order):
        place_order(email="grace@navy.mil")
        place_order(email="alan@example.com")
        orders, _ = current_domain.repository_for(Order).list_orders(page=1, limit=10, email="NAVY")
        assert [o.contact_email for o in orders] == ["grace@navy.mil"]


class TestAnalytics:
    def test_totals_and_breakdowns(self, place_order):
        first = place_order(quantity=2)
        place_order(quantity=1, payment_method="paypal")
        _set_status(first, "confirmed")

        stats = current_domain.repository_for(Order).analytics()
        assert stats["total_orders"] == 2
        assert stats["total_revenue"] == 60.0
        assert stats["average_order_value"] == 30.0
        assert stats["total_items"] == 3
        assert stats["by_status"]["confirmed"] == 1
        assert stats["by_status"]["pending"] == 1
        assert stats["by_status"]["delivered"] == 0
        assert stats["by_payment_method"] == {"credit_card": 1, "paypal": 1}

    def test_empty_analytics(self):
        stats = current_domain.repository_for(Order).analytics()
        assert stats["total_orders"] == 0
        assert stats["average_order_value"] == 0.0
