"""Translate storefront errors into HTTP responses.

Every error body has the shape ``{"error": <payload>, "code": <ErrorClass>}``
where the payload is the ``{field: [messages]}`` mapping carried by the
exception.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import DuplicatePromoCode, DuplicateSku
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _body(exc, payload=None):
    return {"error": payload if payload is not None else exc.messages, "code": type(exc).__name__}


async def _validation_error(_request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=_body(exc))


async def _invalid_request(_request: Request, exc: RequestValidationError):
    fields = {}
    for problem in exc.errors():
        field = ".".join(str(part) for part in problem["loc"] if part != "body") or "_request"
        fields.setdefault(field, []).append(problem["msg"])
    return JSONResponse(status_code=400, content={"error": fields, "code": "ValidationError"})


async def _not_found(_request: Request, exc: ObjectNotFoundError):
    # Protean's own lookups raise with a bare message
    payload = getattr(exc, "messages", None) or {"_entity": [str(exc)]}
    return JSONResponse(status_code=404, content=_body(exc, payload))


async def _conflict(_request: Request, exc: ValidationError):
    return JSONResponse(status_code=409, content=_body(exc))


async def _version_conflict(request: Request, exc: ExpectedVersionError):
    logger.warning("concurrent_update_rejected", path=request.url.path, detail=str(exc))
    return JSONResponse(
        status_code=409,
        content=_body(exc, {"_entity": ["The record was changed by another request, please retry"]}),
    )


async def _unexpected(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path, method=request.method, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"error": {"_service": ["Something went wrong, please try again later"]}, "code": "InternalError"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's default handlers, then the storefront-specific ones on top."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(DuplicateSku, _conflict)
    app.add_exception_handler(DuplicatePromoCode, _conflict)
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
    app.add_exception_handler(Exception, _unexpected)
