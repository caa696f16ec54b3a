"""Global error hierarchy and FastAPI exception handlers.

All wallfetch-specific errors extend WallfetchError. Precondition failures
(no network, no endpoints, all endpoints disabled, rate limited, shutting
down) extend PreconditionError and are surfaced to callers as empty results.
Transport and response-shape failures are recovered inside the fetch pipeline
and only ever leave it as data inside a FetchResult.

The FastAPI exception handlers catch these errors (plus Pydantic's
RequestValidationError and unhandled exceptions) and return a consistent JSON
envelope: { success, data, error, meta }.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class WallfetchError(Exception):
    """Base error for all wallfetch-specific errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


# -- Preconditions ----------------------------------------------------------


class PreconditionError(WallfetchError):
    """A fetch was refused before any endpoint was called."""

    status_code = 503
    message = "Fetch preconditions not met"


class NoNetworkError(PreconditionError):
    """The host has no network connectivity."""

    message = "No network connection"


class NoEndpointsConfiguredError(PreconditionError):
    """The endpoint registry is empty."""

    message = "No endpoints configured"


class AllEndpointsDisabledError(PreconditionError):
    """Every configured endpoint is currently disabled."""

    message = "All endpoints are disabled"


class RateLimitedError(PreconditionError):
    """Batch collect was called again before the cooldown elapsed."""

    status_code = 429
    message = "Rate limited, retry after cooldown"

    def __init__(self, message: str | None = None, *, retry_after: float = 0.0) -> None:
        super().__init__(message, retry_after=round(retry_after, 3))
        self.retry_after = retry_after


class ServiceShuttingDownError(PreconditionError):
    """The executor is draining and no longer accepts work."""

    message = "Service is shutting down"


# -- Fetch failures ---------------------------------------------------------


class TransportError(WallfetchError):
    """Raised by a transport when an endpoint call fails."""

    status_code = 502
    message = "Endpoint call failed"


class EndpointError(WallfetchError):
    """A failure attributed to a single endpoint."""

    status_code = 502
    message = "Endpoint failure"

    def __init__(self, endpoint: str, message: str | None = None, **kwargs: object) -> None:
        super().__init__(message, endpoint=endpoint, **kwargs)
        self.endpoint = endpoint


class TransportFailureError(EndpointError):
    """The transport raised while calling an endpoint."""

    message = "Transport failure"

    def __init__(self, endpoint: str, cause: BaseException) -> None:
        super().__init__(
            endpoint,
            f"Transport failure for {endpoint}: {cause}",
            cause=type(cause).__name__,
        )
        self.cause = cause


class InvalidResponseShapeError(EndpointError):
    """The endpoint responded, but no usable URL could be extracted."""

    message = "URL missing or invalid"


class RetriesExhaustedError(EndpointError):
    """Every attempt against an endpoint failed."""

    message = "Exhausted retries for endpoint"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(
    status_code: int,
    error: str,
    meta: dict | None = None,
) -> JSONResponse:
    """Build a JSON envelope error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": error,
            "meta": meta,
        },
    )


async def _wallfetch_error_handler(_request: Request, exc: WallfetchError) -> JSONResponse:
    """Handle WallfetchError subclasses."""
    meta = exc.details if exc.details else None
    return _envelope(exc.status_code, exc.message, meta=meta)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return _envelope(
        status_code=422,
        error="Validation error",
        meta={"fields": field_errors},
    )


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log traceback, return generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return _envelope(status_code=500, error="Internal server error")


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(WallfetchError, _wallfetch_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
