"""Storefront bounded context — catalog, guest carts, promo codes, checkout and orders.

Every aggregate here is a plain CQRS aggregate. Checkout runs as a single
command handler, so the unit of work wrapped around it commits the order,
the stock decrements, the promo usage and the emptied cart together.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="storefront")

logger = get_logger(__name__)

storefront = Domain(name="storefront")
