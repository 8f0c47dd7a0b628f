"""Checkout commit — turns a live, in-stock cart into an order.

Every check runs before anything is mutated, and all writes happen in the
unit of work that wraps the handler: the new order, the stock decrements,
the promo usage and the cleared cart are committed together or not at all.
Each aggregate write is version-checked, so a concurrent checkout that read
the same stock or promo counter fails instead of overselling.
"""

import json

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalog.product import Product
from storefront.checkout.rules import inspect_lines, resolve_promo
from storefront.domain import storefront
from storefront.errors import EmptyCart
from storefront.order.order import Order
from storefront.promotion.promo_code import PromoCode
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    cart_token = String(required=True, max_length=64)
    customer = Text(required=True)  # JSON: {email, first_name, last_name, phone}
    shipping_address = Text(required=True)  # JSON: {street, city, state, zip_code, country}
    billing_address = Text()  # JSON, defaults to the shipping address
    payment_method = String(required=True, max_length=20)
    promo_code = String(max_length=20)
    notes = Text()


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.get_active_cart(command.cart_token)
        if not cart.items:
            raise EmptyCart({"cart": ["Cart is empty"]})

        products, problems = inspect_lines(cart)
        if problems:
            raise problems[0]

        promo, discount = resolve_promo(cart, command.promo_code)

        order = Order.place(
            cart=cart,
            customer=_loads(command.customer),
            shipping_address=_loads(command.shipping_address),
            billing_address=_loads(command.billing_address),
            payment_method=command.payment_method,
            discount=discount,
            promo_code=promo.code if promo else None,
            notes=command.notes,
        )

        for item in cart.items:
            products[str(item.product_id)].decrement_stock(item.variant_id, item.quantity)
        if promo is not None:
            promo.record_usage()
        cart.clear()

        current_domain.repository_for(Order).add(order)
        product_repo = current_domain.repository_for(Product)
        for product in products.values():
            product_repo.add(product)
        if promo is not None:
            current_domain.repository_for(PromoCode).add(promo)
        cart_repo.add(cart)

        logger.info(
            "order_placed",
            order_number=order.order_number,
            total=order.total,
            promo_code=order.promo_code,
        )
        return str(order.id)
