"""Promo resolution shared by the cart and checkout.

The discount arithmetic itself lives on ``PromoCode``; this module answers
"which promo, if any, applies to this subtotal right now".
"""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.promotion.promo_code import PromoCode


def find_usable_promo(code, subtotal, now=None) -> PromoCode | None:
    """Return the promo for ``code`` if it is valid and ``subtotal`` meets its minimum."""
    if not code:
        return None
    now = now or datetime.now(UTC)
    promo = current_domain.repository_for(PromoCode).find_by_code(code)
    if promo is None or not promo.is_valid(now) or not promo.meets_minimum(subtotal):
        return None
    return promo


def validate_promo(code, subtotal, now=None) -> dict:
    """Answer ``{is_valid, discount, promo}`` for a code and a subtotal."""
    now = now or datetime.now(UTC)
    promo = find_usable_promo(code, subtotal, now)
    if promo is None:
        return {"is_valid": False, "discount": 0.0, "promo": None}
    return {
        "is_valid": True,
        "discount": promo.calculate_discount(subtotal, now),
        "promo": promo,
    }
