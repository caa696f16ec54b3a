"""Endpoint transport — call an endpoint, get a structured response.

The fetch pipeline only depends on the ``Transport`` protocol. The default
``HttpTransport`` issues a blocking GET with httpx and decodes a JSON object.
It runs on worker threads, so it uses the synchronous httpx client, shared
across threads.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from wallfetch.middleware.error_handler import TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can turn an endpoint identifier into a key/value response."""

    def call(self, endpoint: str) -> Mapping[str, Any]: ...


class HttpTransport:
    """httpx-backed transport.

    Parameters
    ----------
    timeout_seconds:
        Per-request timeout.
    client:
        Optional pre-built ``httpx.Client`` (tests pass one wired to
        ``httpx.MockTransport``).
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    def call(self, endpoint: str) -> Mapping[str, Any]:
        """GET *endpoint* and return its JSON object body.

        Raises
        ------
        TransportError
            On connection errors, timeouts, non-2xx statuses, undecodable
            bodies, or a JSON body that is not an object.
        """
        try:
            response = self._client.get(endpoint)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{endpoint} returned status {exc.response.status_code}",
                status=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {endpoint} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"{endpoint} returned a non-JSON body") from exc

        if not isinstance(payload, dict):
            raise TransportError(
                f"{endpoint} returned JSON {type(payload).__name__}, expected object"
            )
        return payload

    def close(self) -> None:
        self._client.close()
