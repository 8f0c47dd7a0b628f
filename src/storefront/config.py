"""Runtime settings read from the process environment.

Protean's own settings (databases, brokers, event store) live in
``domain.toml`` and are selected with ``PROTEAN_ENV``. The values here are
the storefront's business knobs.
"""

import os

# Carts expire this many days after they were (re)created
CART_TTL_DAYS = int(os.getenv("CART_TTL_DAYS", "7"))

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]


def environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def clamp_page(page: int | None, limit: int | None) -> tuple[int, int]:
    """Normalize pagination arguments to a 1-based page and a bounded page size."""
    page = max(page or 1, 1)
    limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return page, limit
