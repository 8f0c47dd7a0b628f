"""PromoCode aggregate — discount rules and their usage counter.

A promo is usable while it is active, the current time lies within its
validity window, and its usage cap (if any) has not been reached. The
discount it grants is a pure function of the promo and the subtotal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.domain import storefront
from storefront.errors import InvalidPromo
from storefront.utils.clock import as_utc


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code):
    return (code or "").strip().upper()


@storefront.aggregate
class PromoCode:
    code = String(required=True, max_length=20, unique=True)
    description = String(max_length=200)
    discount_type = String(required=True, choices=DiscountType)
    value = Float(required=True, min_value=0.0)
    max_discount = Float(min_value=0.0)
    min_order_amount = Float(min_value=0.0)
    valid_from = DateTime(required=True)
    valid_to = DateTime(required=True)
    max_uses = Integer(min_value=1)
    used_count = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def value_must_be_positive(self):
        if self.value is not None and self.value <= 0:
            raise ValidationError({"value": ["Discount value must be greater than zero"]})
        if self.discount_type == DiscountType.PERCENTAGE.value and self.value and self.value > 100:
            raise ValidationError({"value": ["A percentage discount cannot exceed 100"]})

    @invariant.post
    def window_must_end_after_it_starts(self):
        if self.valid_from and self.valid_to and as_utc(self.valid_to) <= as_utc(self.valid_from):
            raise ValidationError({"valid_to": ["Valid-to date must be after valid-from date"]})

    @invariant.post
    def usage_cannot_exceed_cap(self):
        if self.max_uses is not None and (self.used_count or 0) > self.max_uses:
            raise ValidationError({"used_count": ["Usage count cannot exceed the maximum number of uses"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        discount_type,
        value,
        valid_from,
        valid_to,
        description=None,
        max_discount=None,
        min_order_amount=None,
        max_uses=None,
        is_active=True,
    ):
        now = datetime.now(UTC)
        return cls(
            code=normalize_code(code),
            description=description,
            discount_type=discount_type,
            value=value,
            max_discount=max_discount,
            min_order_amount=min_order_amount,
            valid_from=as_utc(valid_from),
            valid_to=as_utc(valid_to),
            max_uses=max_uses,
            used_count=0,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------
    def is_valid(self, now=None):
        now = as_utc(now) or datetime.now(UTC)
        if not self.is_active:
            return False
        if not (as_utc(self.valid_from) <= now <= as_utc(self.valid_to)):
            return False
        return not self.is_exhausted

    def meets_minimum(self, subtotal):
        return self.min_order_amount is None or subtotal >= self.min_order_amount

    def calculate_discount(self, subtotal, now=None):
        """Discount granted on ``subtotal``; never negative and never above ``subtotal``.

        Has no side effects: identical inputs always give the same amount.
        """
        if not self.is_valid(now) or not self.meets_minimum(subtotal):
            return 0.0

        if self.discount_type == DiscountType.PERCENTAGE.value:
            discount = subtotal * self.value / 100
        else:
            discount = self.value

        if self.max_discount is not None:
            discount = min(discount, self.max_discount)

        return round(max(min(discount, subtotal), 0.0), 2)

    @property
    def is_exhausted(self):
        return self.max_uses is not None and (self.used_count or 0) >= self.max_uses

    def is_expired(self, now=None):
        now = as_utc(now) or datetime.now(UTC)
        return as_utc(self.valid_to) < now

    @property
    def usage_percentage(self):
        if self.max_uses is None:
            return None
        return round((self.used_count or 0) / self.max_uses * 100, 2)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def record_usage(self):
        """Count one redemption. Refuses to go past ``max_uses``."""
        if self.is_exhausted:
            raise InvalidPromo({"promo_code": [f"Promo code {self.code} has reached its usage limit"]})
        self.used_count = (self.used_count or 0) + 1
        self.updated_at = datetime.now(UTC)

    def update(self, **changes):
        """Apply a partial update. ``code`` and ``used_count`` are not editable."""
        allowed = {
            "description",
            "discount_type",
            "value",
            "max_discount",
            "min_order_amount",
            "valid_from",
            "valid_to",
            "max_uses",
            "is_active",
        }
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError({field: ["Field cannot be updated"] for field in sorted(unknown)})

        with atomic_change(self):
            for field, value in changes.items():
                if field in ("valid_from", "valid_to"):
                    value = as_utc(value)
                setattr(self, field, value)
            self.updated_at = datetime.now(UTC)

    def to_dict(self, now=None):
        return {
            "id": str(self.id),
            "code": self.code,
            "description": self.description,
            "discount_type": self.discount_type,
            "value": self.value,
            "max_discount": self.max_discount,
            "min_order_amount": self.min_order_amount,
            "valid_from": self.valid_from,
            "valid_to": self.valid_to,
            "max_uses": self.max_uses,
            "used_count": self.used_count,
            "is_active": self.is_active,
            "is_expired": self.is_expired(now),
            "is_exhausted": self.is_exhausted,
            "usage_percentage": self.usage_percentage,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
