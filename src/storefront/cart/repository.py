"""Token-based lookups over shopping carts.

Expired carts are treated as if they did not exist.
"""

from datetime import UTC, datetime

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.errors import CartNotFound
from storefront.utils.queries import scan


@storefront.repository(part_of=ShoppingCart)
class CartRepository:
    def find_by_token(self, token) -> ShoppingCart | None:
        """Return the cart for ``token`` whether or not it has expired."""
        if not token:
            return None
        return self._dao.query.filter(token=token).all().first

    def get_active_cart(self, token, now=None) -> ShoppingCart:
        cart = self.find_by_token(token)
        if cart is None or cart.is_expired(now):
            raise CartNotFound({"cart": [f"Cart {token} not found or expired"]})
        return cart

    def find_expired(self, now=None) -> list[ShoppingCart]:
        now = now or datetime.now(UTC)
        return list(scan(self._dao.query.filter(expires_at__lte=now)))
