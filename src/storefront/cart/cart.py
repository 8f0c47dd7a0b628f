"""Shopping cart aggregate — a guest cart addressed by an opaque token.

The cart keeps a snapshot of price and names for every line, and carries
derived ``subtotal``, ``discount`` and ``total`` fields. Every mutation ends
by recomputing those totals, so what is persisted always agrees with the
persisted lines:

    subtotal = sum(price * quantity)
    0 <= discount <= subtotal
    total = subtotal - discount
"""

import secrets
import string
import time
from datetime import UTC, datetime, timedelta

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront import config
from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
    CartPromoApplied,
    CartPromoRemoved,
)
from storefront.domain import storefront
from storefront.errors import ItemNotFound
from storefront.utils.clock import as_utc

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
_TOLERANCE = 0.005


def generate_cart_token():
    """Tokens look like ``cart_1718000000000_k3j9x0a2b``."""
    suffix = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(9))
    return f"cart_{int(time.time() * 1000)}_{suffix}"


def _money(amount):
    return round(amount or 0.0, 2)


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Snapshot at time of add
    product_name = String(required=True, max_length=200)
    variant_name = String(required=True, max_length=100)
    sku = String(required=True, max_length=64)

    @property
    def line_total(self):
        return _money(self.price * self.quantity)

    def matches(self, product_id, variant_id):
        return str(self.product_id) == str(product_id) and str(self.variant_id) == str(variant_id)

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "variant_id": str(self.variant_id),
            "quantity": self.quantity,
            "price": self.price,
            "product_name": self.product_name,
            "variant_name": self.variant_name,
            "sku": self.sku,
            "line_total": self.line_total,
        }


@storefront.aggregate
class ShoppingCart:
    token = String(required=True, max_length=64, unique=True)
    items = HasMany(CartItem)
    promo_code = String(max_length=20)
    subtotal = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    expires_at = DateTime(required=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_must_match_lines(self):
        expected = _money(sum(item.price * item.quantity for item in self.items))
        if abs((self.subtotal or 0.0) - expected) > _TOLERANCE:
            raise ValidationError({"subtotal": ["Subtotal does not match cart lines"]})
        if abs((self.total or 0.0) - _money((self.subtotal or 0.0) - (self.discount or 0.0))) > _TOLERANCE:
            raise ValidationError({"total": ["Total must equal subtotal minus discount"]})

    @invariant.post
    def discount_must_not_exceed_subtotal(self):
        if (self.discount or 0.0) < 0 or (self.discount or 0.0) > (self.subtotal or 0.0) + _TOLERANCE:
            raise ValidationError({"discount": ["Discount must be between zero and the subtotal"]})

    @invariant.post
    def lines_must_be_unique(self):
        keys = [(str(i.product_id), str(i.variant_id)) for i in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A product variant can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory & lifetime
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, token=None, ttl_days=None):
        now = datetime.now(UTC)
        return cls(
            token=token or generate_cart_token(),
            subtotal=0.0,
            discount=0.0,
            total=0.0,
            expires_at=now + timedelta(days=ttl_days or config.CART_TTL_DAYS),
            created_at=now,
            updated_at=now,
        )

    def is_expired(self, now=None):
        return as_utc(self.expires_at) <= (as_utc(now) or datetime.now(UTC))

    def restart(self, ttl_days=None):
        """Reuse an expired cart's token as a brand new, empty cart."""
        now = datetime.now(UTC)
        with atomic_change(self):
            self._empty()
            self.created_at = now
            self.expires_at = now + timedelta(days=ttl_days or config.CART_TTL_DAYS)
            self.updated_at = now

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def find_item(self, product_id, variant_id):
        return next((i for i in self.items if i.matches(product_id, variant_id)), None)

    def add_item(self, product_id, variant_id, quantity, price, product_name, variant_name, sku):
        """Add ``quantity`` units, merging into an existing line for the same variant."""
        if not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})

        with atomic_change(self):
            existing = self.find_item(product_id, variant_id)
            if existing:
                existing.quantity += quantity
            else:
                self.add_items(
                    CartItem(
                        product_id=product_id,
                        variant_id=variant_id,
                        quantity=quantity,
                        price=price,
                        product_name=product_name,
                        variant_name=variant_name,
                        sku=sku,
                    )
                )
            self._recalculate()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                token=self.token,
                product_id=str(product_id),
                variant_id=str(variant_id),
                quantity=quantity,
            )
        )
        return self.snapshot()

    def update_quantity(self, product_id, variant_id, new_quantity):
        """Set a line's quantity; zero or less removes the line."""
        item = self.find_item(product_id, variant_id)
        if item is None:
            raise ItemNotFound({"item": [f"Item {product_id}/{variant_id} not found in cart"]})

        if new_quantity <= 0:
            return self.remove_item(product_id, variant_id)

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = new_quantity
            self._recalculate()

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )
        return self.snapshot()

    def remove_item(self, product_id, variant_id):
        """Remove a line. Removing a line that is not there changes nothing."""
        item = self.find_item(product_id, variant_id)
        if item is None:
            return self.snapshot()

        with atomic_change(self):
            self.remove_items(item)
            self._recalculate()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
            )
        )
        return self.snapshot()

    # -------------------------------------------------------------------
    # Promo
    # -------------------------------------------------------------------
    def apply_promo(self, code, discount_amount):
        with atomic_change(self):
            self.promo_code = code
            self.discount = min(max(discount_amount or 0.0, 0.0), self.subtotal or 0.0)
            self._recalculate()

        self.raise_(CartPromoApplied(cart_id=str(self.id), promo_code=code, discount=self.discount))
        return self.snapshot()

    def remove_promo(self):
        previous_code = self.promo_code
        with atomic_change(self):
            self.promo_code = None
            self.discount = 0.0
            self._recalculate()

        if previous_code:
            self.raise_(CartPromoRemoved(cart_id=str(self.id), promo_code=previous_code))
        return self.snapshot()

    def clear(self):
        """Empty the cart, drop the promo and zero the discount."""
        with atomic_change(self):
            self._empty()

        self.raise_(CartCleared(cart_id=str(self.id), token=self.token))
        return self.snapshot()

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _empty(self):
        for item in list(self.items):
            self.remove_items(item)
        self.promo_code = None
        self.discount = 0.0
        self._recalculate()

    def _recalculate(self):
        self.subtotal = _money(sum(item.price * item.quantity for item in self.items))
        self.discount = _money(min(max(self.discount or 0.0, 0.0), self.subtotal))
        self.total = _money(self.subtotal - self.discount)
        self.updated_at = datetime.now(UTC)

    def snapshot(self):
        return {
            "token": self.token,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "discount": self.discount,
            "total": self.total,
            "promo_code": self.promo_code,
            "expires_at": self.expires_at,
        }
