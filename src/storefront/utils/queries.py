"""Helpers over Protean's query sets for paginated listings and full scans."""

import math

_SCAN_BATCH = 100


def order_clause(field: str, sort_order: str = "desc") -> str:
    return field if sort_order == "asc" else f"-{field}"


def paginate(query, page: int, limit: int, sort_field: str, sort_order: str = "desc"):
    """Run ``query`` for one page. Returns ``(items, pagination)``."""
    results = query.order_by(order_clause(sort_field, sort_order)).offset((page - 1) * limit).limit(limit).all()
    return results.items, {
        "page": page,
        "limit": limit,
        "total": results.total,
        "total_pages": math.ceil(results.total / limit) if limit else 0,
    }


def scan(query, batch: int = _SCAN_BATCH):
    """Yield every record matched by ``query``, one batch at a time."""
    offset = 0
    while True:
        results = query.offset(offset).limit(batch).all()
        yield from results.items
        offset += batch
        if offset >= results.total or not results.items:
            break
