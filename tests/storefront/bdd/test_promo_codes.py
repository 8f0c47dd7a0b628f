"""BDD tests for promo code pricing."""

import pytest
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.promotion.engine import validate_promo
from storefront.promotion.promo_code import PromoCode

scenarios("features/promo_codes.feature")


@pytest.fixture()
def outcome():
    return {}


@given(
    parsers.cfparse('a {kind} promo "{code}" of {value:g} with a cap of {cap:g} and a minimum of {minimum:g}'),
    target_fixture="promo",
)
def configured_promo(make_promo, kind, code, value, cap, minimum):
    return make_promo(
        code=code,
        discount_type=kind,
        value=value,
        max_discount=cap or None,
        min_order_amount=minimum or None,
    )


@given(parsers.cfparse('promo "{code}" has been redeemed once'))
def redeemed_once(code):
    repo = current_domain.repository_for(PromoCode)
    promo = repo.find_by_code(code)
    promo.record_usage()
    repo.add(promo)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the promo is priced against a subtotal of {subtotal:g}"))
def price_promo(promo, outcome, subtotal):
    outcome["discount"] = promo.calculate_discount(subtotal)


@when(parsers.cfparse('promo "{code}" is validated against a subtotal of {subtotal:g}'))
def validate(outcome, code, subtotal):
    outcome.update(validate_promo(code, subtotal))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the discount is {discount:g}"))
def discount_is(outcome, discount):
    assert outcome["discount"] == pytest.approx(discount)


@then("the promo is not valid")
def promo_not_valid(outcome):
    assert outcome["is_valid"] is False
    assert outcome["discount"] == 0.0
