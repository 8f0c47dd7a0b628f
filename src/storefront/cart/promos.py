"""Cart promo codes — commands and handler.

The discount shown on a cart is a preview; checkout re-validates the code
against the subtotal at commit time.
"""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.errors import InvalidPromo
from storefront.promotion.engine import find_usable_promo


@storefront.command(part_of="ShoppingCart")
class ApplyPromoToCart:
    token = String(required=True, max_length=64)
    code = String(required=True, max_length=20)


@storefront.command(part_of="ShoppingCart")
class RemovePromoFromCart:
    token = String(required=True, max_length=64)


def refresh_promo(cart):
    """Re-price an applied promo against the cart's current subtotal.

    A code that no longer qualifies is dropped from the cart.
    """
    if not cart.promo_code:
        return
    promo = find_usable_promo(cart.promo_code, cart.subtotal)
    if promo is None:
        cart.remove_promo()
    else:
        cart.apply_promo(promo.code, promo.calculate_discount(cart.subtotal))


@storefront.command_handler(part_of=ShoppingCart)
class CartPromoHandler:
    @handle(ApplyPromoToCart)
    def apply_promo(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_active_cart(command.token)

        promo = find_usable_promo(command.code, cart.subtotal)
        if promo is None:
            raise InvalidPromo({"promo_code": [f"Promo code {command.code} is invalid or expired"]})

        snapshot = cart.apply_promo(promo.code, promo.calculate_discount(cart.subtotal))
        repo.add(cart)
        return snapshot

    @handle(RemovePromoFromCart)
    def remove_promo(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_active_cart(command.token)
        snapshot = cart.remove_promo()
        repo.add(cart)
        return snapshot
