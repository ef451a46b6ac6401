"""HTTP mapping for storefront failures.

Protean's own handlers cover its framework exceptions; the handlers here map
the storefront's typed failures onto status codes, all with an
``{"error": messages}`` body:

    ObjectNotFoundError, ItemNotFound            -> 404
    OutOfStock, InsufficientStock                -> 409
    InvalidTransition, ExpectedVersionError      -> 409
    any other ValidationError (incl. InvalidOrder) -> 400

An ExpectedVersionError only reaches the client once Protean's handler-level
version retry has given up on the command.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import InvalidTransition, ItemNotFound, OutOfStock

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR = [
    (ItemNotFound, 404),
    (OutOfStock, 409),
    (InvalidTransition, 409),
    (ValidationError, 400),
]


def status_for(exc: Exception) -> int:
    for error_class, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return 500


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "Request rejected",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content={"error": exc.messages})


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or {"_entity": [str(exc)]}
    return JSONResponse(status_code=404, content={"error": messages})


async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Write conflict surfaced to client", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=409, content={"error": {"_concurrency": [str(exc)]}})


def register_storefront_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then the storefront's more specific ones."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
