"""Storefront FastAPI application.

Processes commands synchronously over HTTP; every request runs inside the
storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import ALLOWED_ORIGINS, environment
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, get_logger

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay in domain.toml.
storefront.init()

logger = get_logger("storefront.http")

from storefront.api.cart import cart_router  # noqa: E402
from storefront.api.catalog import catalog_router  # noqa: E402
from storefront.api.checkout import checkout_router  # noqa: E402
from storefront.api.errors import register_error_handlers  # noqa: E402
from storefront.api.orders import order_router  # noqa: E402
from storefront.api.promos import promo_router  # noqa: E402

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Catalog browsing, guest carts, promo codes, checkout and order tracking",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context for each request."""
    with storefront.domain_context():
        return await call_next(request)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    clear_context()
    add_context(
        request_id=request.headers.get("x-request-id", uuid.uuid4().hex),
        method=request.method,
        path=request.url.path,
    )
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "request_completed",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
for router in (catalog_router, cart_router, promo_router, checkout_router, order_router):
    app.include_router(router, prefix="/api")

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "environment": environment(),
            "domain": storefront.name,
        }
    )
