"""Checks shared by committing a checkout and reviewing one.

Both run against live data: stock may have moved and promos may have
expired since the shopper filled the cart.
"""

from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.errors import InsufficientStock, InvalidPromo, ProductUnavailable
from storefront.promotion.engine import find_usable_promo


def inspect_lines(cart):
    """Re-check every cart line against the catalog.

    Returns ``(products, problems)``: the loaded products keyed by id (one
    instance per product, shared by all of its lines) and one error per
    offending line, in cart order.
    """
    repo = current_domain.repository_for(Product)
    products = {}
    problems = []

    for item in cart.items:
        key = str(item.product_id)
        if key not in products:
            products[key] = repo.find(key)
        product = products[key]

        if product is None or not product.is_active:
            problems.append(
                ProductUnavailable({"items": [f"Product {item.product_name} is no longer available"]})
            )
            continue

        variant = product.find_variant(item.variant_id)
        if variant is None:
            problems.append(
                ProductUnavailable(
                    {"items": [f"Variant {item.variant_name} of {item.product_name} is no longer available"]}
                )
            )
            continue

        if variant.stock < item.quantity:
            problems.append(
                InsufficientStock(
                    {
                        "items": [
                            f"Insufficient stock for {item.product_name} - {item.variant_name}. "
                            f"Available: {variant.stock}, requested: {item.quantity}"
                        ]
                    }
                )
            )

    return {k: p for k, p in products.items() if p is not None}, problems


def resolve_promo(cart, promo_code=None):
    """Work out the authoritative promo and discount for ``cart``.

    The code supplied at checkout wins over the one applied to the cart.
    Either way it is re-validated against the cart's current subtotal.
    Returns ``(promo, discount)``; ``promo`` is None when no code is in play.
    """
    code = promo_code or cart.promo_code
    if not code:
        return None, min(cart.discount or 0.0, cart.subtotal)

    promo = find_usable_promo(code, cart.subtotal)
    if promo is None:
        raise InvalidPromo({"promo_code": [f"Promo code {code} is invalid or expired"]})
    return promo, promo.calculate_discount(cart.subtotal)


def messages_of(error):
    """Flatten a Protean error payload into a list of human-readable strings."""
    payload = error.messages
    if isinstance(payload, dict):
        return [message for messages in payload.values() for message in messages]
    return [str(payload)]
