"""Shared BDD fixtures and step definitions for the storefront."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then
from storefront.cart.cart import ShoppingCart
from storefront.catalog.product import Product
from storefront.checkout.placement import PlaceOrder
from storefront.promotion.promo_code import PromoCode


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@pytest.fixture()
def shop():
    """Products by name, plus whatever the scenario needs to remember."""
    return {"products": {}, "token": None, "order_id": None}


@pytest.fixture()
def place_order(shop, checkout_details):
    """Check out the scenario's cart and remember the order."""

    def _place(promo_code=None):
        shop["order_id"] = current_domain.process(
            PlaceOrder(
                cart_token=shop["token"],
                customer=json.dumps(checkout_details["customer"]),
                shipping_address=json.dumps(checkout_details["shipping_address"]),
                payment_method=checkout_details["payment_method"],
                promo_code=promo_code,
            ),
            asynchronous=False,
        )
        return shop["order_id"]

    return _place


@pytest.fixture()
def stored_cart(shop):
    def _load():
        return current_domain.repository_for(ShoppingCart).find_by_token(shop["token"])

    return _load


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:g} with {stock:d} in stock'))
def product_in_stock(shop, make_product, name, price, stock):
    shop["products"][name] = make_product(
        name=name,
        variants=[{"name": "Standard", "sku": f"{name[:8].upper().replace(' ', '-')}-STD", "price": price, "stock": stock}],
    )


@given(parsers.cfparse('a percentage promo "{code}" of {value:g}'))
def percentage_promo(make_promo, code, value):
    make_promo(code=code, discount_type="percentage", value=value)


@given(parsers.cfparse('a percentage promo "{code}" of {value:g} capped at {cap:g}'))
def capped_percentage_promo(make_promo, code, value, cap):
    make_promo(code=code, discount_type="percentage", value=value, max_discount=cap)


@given(parsers.cfparse('a fixed promo "{code}" of {value:g}'))
def fixed_promo(make_promo, code, value):
    make_promo(code=code, discount_type="fixed", value=value)


@given(parsers.cfparse('a percentage promo "{code}" of {value:g} limited to {uses:d} use'))
def limited_promo(make_promo, code, value, uses):
    make_promo(code=code, discount_type="percentage", value=value, max_uses=uses)


@given(parsers.cfparse('an expired promo "{code}"'))
def expired_promo(make_promo, code):
    now = datetime.now(UTC)
    make_promo(code=code, valid_from=now - timedelta(days=30), valid_to=now - timedelta(days=1))


@given("a shopper with an empty cart")
def empty_cart(shop, new_cart):
    shop["token"] = new_cart()


@given(parsers.cfparse('the shopper has {quantity:d} of "{name}" in the cart'))
def item_in_cart(shop, add_to_cart, quantity, name):
    add_to_cart(shop["token"], shop["products"][name], quantity=quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the request is rejected with {error_name}"))
def rejected_with(error, error_name):
    assert error["exc"] is not None
    assert isinstance(error["exc"], ValidationError)
    assert type(error["exc"]).__name__ == error_name


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def stock_is(shop, name, stock):
    product = current_domain.repository_for(Product).get(shop["products"][name].id)
    assert product.variants[0].stock == stock


@then(parsers.cfparse('promo "{code}" has been used {count:d} times'))
def promo_used(code, count):
    assert current_domain.repository_for(PromoCode).find_by_code(code).used_count == count


@then(parsers.cfparse("the cart total is {total:g}"))
def cart_total_is(stored_cart, total):
    assert stored_cart().total == pytest.approx(total)


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_lines(stored_cart, count):
    assert len(stored_cart().items) == count
