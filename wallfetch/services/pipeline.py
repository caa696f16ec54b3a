"""Fetch pipeline — one endpoint, bounded retries, URL extraction.

``fetch_one`` calls the transport, pulls the image URL out of the response,
and retries the same endpoint on any failure until ``max_retries`` retries
have been spent (four attempts in total by default). Every failed attempt is
recorded against the endpoint in the health tracker unless the caller opts
out. This is the only place endpoint failures are recorded or responses are
parsed.

The pipeline is synchronous and runs on a worker thread. It knows nothing
about permits or rate limits; callers apply those. It never raises: the
outcome is always a ``FetchResult``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from wallfetch.integration.transport import Transport
from wallfetch.middleware.error_handler import (
    EndpointError,
    InvalidResponseShapeError,
    RetriesExhaustedError,
    TransportFailureError,
)
from wallfetch.models.results import FetchResult
from wallfetch.resilience.health_tracker import EndpointHealthTracker

logger = logging.getLogger(__name__)

URL_KEY = "URL"
DATA_KEY_PREFIX = "$Data"


def extract_url(response: Mapping[str, Any]) -> str | None:
    """Pull the image URL out of an endpoint response.

    A top-level ``"URL"`` key wins. Otherwise the first key starting with
    ``"$Data"`` is used, and its value must itself be a mapping holding
    ``"URL"``. Returns None when neither shape matches or the value is not a
    non-empty string.
    """
    if URL_KEY in response:
        value = response[URL_KEY]
    else:
        value = None
        for key, nested in response.items():
            if isinstance(key, str) and key.startswith(DATA_KEY_PREFIX):
                if isinstance(nested, Mapping):
                    value = nested.get(URL_KEY)
                break

    if isinstance(value, str) and value:
        return value
    return None


class FetchPipeline:
    """Runs one endpoint call with retries and reports failures to the tracker.

    Parameters
    ----------
    transport:
        Performs the actual endpoint call.
    health_tracker:
        Receives one ``record_failure`` per failed attempt.
    max_retries:
        Retries after the initial attempt (default 3, so 4 attempts).
    retry_delay_seconds:
        Fixed pause between attempts (default none).
    """

    def __init__(
        self,
        *,
        transport: Transport,
        health_tracker: EndpointHealthTracker,
        max_retries: int = 3,
        retry_delay_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._health = health_tracker
        self._max_retries = max_retries
        self._retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    def fetch_one(self, endpoint: str, *, record_failures: bool = True) -> FetchResult:
        """Fetch one image URL from *endpoint*.

        With ``record_failures=False`` failed attempts are only logged and the
        health tracker is left untouched.
        """
        last_error: EndpointError | None = None
        start = time.monotonic()

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self._transport.call(endpoint)
            except Exception as exc:  # noqa: BLE001
                last_error = TransportFailureError(endpoint, exc)
            else:
                logger.debug("Endpoint %s responded: %s", endpoint, response)
                url = extract_url(response)
                if url is not None:
                    logger.debug(
                        "Got image URL from %s on attempt %d",
                        endpoint,
                        attempt,
                        extra={
                            "endpoint": endpoint,
                            "attempt": attempt,
                            "duration_ms": round((time.monotonic() - start) * 1000, 1),
                        },
                    )
                    return FetchResult.success(endpoint, url, attempts=attempt)
                last_error = InvalidResponseShapeError(endpoint)

            if record_failures:
                self._health.record_failure(endpoint)
            logger.warning(
                "Attempt %d/%d against %s failed: %s",
                attempt,
                self.max_attempts,
                endpoint,
                last_error.message,
                extra={
                    "endpoint": endpoint,
                    "attempt": attempt,
                    "error_reason": last_error.message,
                },
            )
            if attempt < self.max_attempts and self._retry_delay_seconds > 0:
                self._sleep(self._retry_delay_seconds)

        error = RetriesExhaustedError(
            endpoint,
            f"Exhausted {self._max_retries} retries for endpoint {endpoint}",
            attempts=self.max_attempts,
        )
        error.__cause__ = last_error
        logger.error(
            "%s",
            error.message,
            extra={
                "endpoint": endpoint,
                "attempt": self.max_attempts,
                "error_reason": last_error.message if last_error else None,
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )
        return FetchResult.failure(endpoint, error, attempts=self.max_attempts)
