"""Expected, caller-recoverable failures raised by the storefront.

Each error carries Protean's ``{field: [messages]}`` payload so the HTTP
layer can echo it back unchanged. Not-found conditions derive from
``ObjectNotFoundError`` (404); rule violations derive from
``ValidationError`` (400, or 409 for duplicates).
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
class NotFound(ObjectNotFoundError):
    """Base for lookups that miss; carries a ``{field: [messages]}`` payload."""

    def __init__(self, messages, **kwargs):
        self.messages = messages
        super().__init__(messages, **kwargs)

    def __str__(self):
        return f"{self.messages}"


class CartNotFound(NotFound):
    """No cart for the token, or the cart has expired."""


class ItemNotFound(NotFound):
    """No cart line for the (product, variant) pair."""


class ProductNotFound(NotFound):
    pass


class VariantNotFound(NotFound):
    pass


class OrderNotFound(NotFound):
    pass


class PromoCodeNotFound(NotFound):
    pass


# ---------------------------------------------------------------------------
# Rule violations
# ---------------------------------------------------------------------------
class EmptyCart(ValidationError):
    pass


class ProductUnavailable(ValidationError):
    """The product is missing or inactive, or its variant no longer exists."""


class InsufficientStock(ValidationError):
    pass


class InvalidPromo(ValidationError):
    """Covers unknown, inactive, expired, exhausted and below-minimum codes."""


class InvalidTransition(ValidationError):
    pass


class DuplicateSku(ValidationError):
    pass


class DuplicatePromoCode(ValidationError):
    pass
