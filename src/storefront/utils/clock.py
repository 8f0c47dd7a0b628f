"""Timezone helpers. Everything the storefront stores is in UTC."""

from datetime import UTC, datetime


def as_utc(moment):
    """Treat naive datetimes as UTC so comparisons never mix aware and naive values."""
    if moment is None:
        return None
    if isinstance(moment, str):
        moment = datetime.fromisoformat(moment)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
