"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared
across users. State tracks identifiers returned by the API so follow-up
requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CatalogState:
    """Purchasable (product_id, variant_id, stock) triples seen while browsing."""

    variants: list[tuple[str, str, int]] = field(default_factory=list)


@dataclass
class CartState:
    """Tracks a shopper's cart lifecycle."""

    token: str | None = None
    line_count: int = 0
    subtotal: float = 0.0
    promo_code: str | None = None


@dataclass
class OrderState:
    """Tracks a single order lifecycle."""

    order_id: str | None = None
    order_number: str | None = None
    current_status: str = "pending"
    payment_status: str = "pending"
