"""Read-only checkout helpers for confirmation screens and price previews."""

from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.rules import inspect_lines, messages_of, resolve_promo
from storefront.errors import InvalidPromo
from storefront.promotion.engine import validate_promo


def validate_checkout(cart_token, promo_code=None) -> dict:
    """Run every checkout check without changing anything.

    Unlike the commit, which stops at the first failure, this collects all
    problems. A missing or expired cart still raises ``CartNotFound``.
    """
    cart = current_domain.repository_for(ShoppingCart).get_active_cart(cart_token)

    errors = []
    if not cart.items:
        errors.append("Cart is empty")

    _, problems = inspect_lines(cart)
    for problem in problems:
        errors.extend(messages_of(problem))

    if cart.items:
        try:
            resolve_promo(cart, promo_code)
        except InvalidPromo as exc:
            errors.extend(messages_of(exc))

    return {"is_valid": not errors, "errors": errors, "cart": cart.snapshot()}


def preview_totals(cart_token, promo_code=None) -> dict:
    """Price the cart with ``promo_code`` (or the cart's own code) applied.

    An unusable code previews as no discount rather than an error.
    """
    cart = current_domain.repository_for(ShoppingCart).get_active_cart(cart_token)
    subtotal = cart.subtotal

    code = promo_code or cart.promo_code
    if code:
        result = validate_promo(code, subtotal)
        discount, promo = result["discount"], result["promo"]
    else:
        discount, promo = 0.0, None

    return {
        "subtotal": subtotal,
        "discount": discount,
        "total": round(subtotal - discount, 2),
        "promo": promo,
    }
