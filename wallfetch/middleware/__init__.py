"""Middleware package — error hierarchy, exception handlers, and request ID."""

from wallfetch.middleware.error_handler import (
    AllEndpointsDisabledError,
    EndpointError,
    InvalidResponseShapeError,
    NoEndpointsConfiguredError,
    NoNetworkError,
    PreconditionError,
    RateLimitedError,
    RetriesExhaustedError,
    ServiceShuttingDownError,
    TransportError,
    TransportFailureError,
    WallfetchError,
    register_error_handlers,
)
from wallfetch.middleware.request_id import RequestIdMiddleware, request_id_var

__all__ = [
    "AllEndpointsDisabledError",
    "EndpointError",
    "InvalidResponseShapeError",
    "NoEndpointsConfiguredError",
    "NoNetworkError",
    "PreconditionError",
    "RateLimitedError",
    "RequestIdMiddleware",
    "RetriesExhaustedError",
    "ServiceShuttingDownError",
    "TransportError",
    "TransportFailureError",
    "WallfetchError",
    "register_error_handlers",
    "request_id_var",
]
