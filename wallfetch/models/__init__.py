"""Public models for the wallfetch service."""

from wallfetch.models.requests import BatchCollectRequest, RaceRequest
from wallfetch.models.responses import ApiResponse
from wallfetch.models.results import FetchResult

__all__ = [
    "ApiResponse",
    "BatchCollectRequest",
    "FetchResult",
    "RaceRequest",
]
