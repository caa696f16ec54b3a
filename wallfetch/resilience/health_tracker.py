"""Per-endpoint failure tracking with time-boxed disabling.

Each endpoint gets a failure counter and the timestamp of its most recent
failure. An endpoint is *disabled* while it has at least ``failure_threshold``
failures AND its last failure happened less than ``disable_window_seconds``
ago. Disabled status is derived on read and is never stored, so it lifts on
its own once the window elapses.

The counter only goes up on failure. It goes back to zero only through
``rehabilitate()``, which the health prober calls after a successful probe.
A successful ordinary fetch leaves the counter untouched.

Updates come from worker threads, so every read-modify-write of a
count/timestamp pair happens under a lock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class EndpointHealth:
    """Failure state tracked per endpoint."""

    endpoint: str
    failure_count: int = 0
    last_failure_at: float | None = None  # time.monotonic()


class EndpointHealthTracker:
    """Thread-safe failure counters for the endpoint set.

    Args:
        failure_threshold: Failures needed before an endpoint is disabled.
        disable_window_seconds: How long after its last failure a failing
            endpoint stays disabled.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        disable_window_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._failure_threshold = failure_threshold
        self._disable_window_seconds = disable_window_seconds
        self._clock = clock
        self._health: dict[str, EndpointHealth] = {}
        self._lock = threading.Lock()

    @property
    def failure_threshold(self) -> int:
        return self._failure_threshold

    def record_failure(self, endpoint: str) -> int:
        """Count one failure against *endpoint* and return the new total."""
        with self._lock:
            health = self._health.get(endpoint)
            if health is None:
                health = self._health[endpoint] = EndpointHealth(endpoint=endpoint)
            health.failure_count += 1
            health.last_failure_at = self._clock()
            count = health.failure_count

        if count == self._failure_threshold:
            logger.warning(
                "Endpoint %s failed %d times, disabled for %ss",
                endpoint,
                count,
                self._disable_window_seconds,
                extra={"endpoint": endpoint},
            )
        return count

    def failure_count(self, endpoint: str) -> int:
        with self._lock:
            health = self._health.get(endpoint)
            return health.failure_count if health else 0

    def is_disabled(self, endpoint: str, now: float | None = None) -> bool:
        """Whether *endpoint* is disabled at time *now* (defaults to the clock)."""
        if now is None:
            now = self._clock()
        with self._lock:
            health = self._health.get(endpoint)
            if health is None or health.last_failure_at is None:
                return False
            return (
                health.failure_count >= self._failure_threshold
                and now - health.last_failure_at < self._disable_window_seconds
            )

    def list_disabled(self, endpoints: Iterable[str], now: float | None = None) -> set[str]:
        """Return the subset of *endpoints* disabled at time *now*."""
        if now is None:
            now = self._clock()
        return {endpoint for endpoint in endpoints if self.is_disabled(endpoint, now)}

    def list_failing(self, endpoints: Iterable[str]) -> list[str]:
        """Endpoints at or over the failure threshold, whether or not the window has lapsed."""
        return [
            endpoint
            for endpoint in endpoints
            if self.failure_count(endpoint) >= self._failure_threshold
        ]

    def rehabilitate(self, endpoint: str) -> None:
        """Reset the failure counter for *endpoint*."""
        with self._lock:
            health = self._health.get(endpoint)
            if health is not None:
                health.failure_count = 0

    def get_stats(self, endpoints: Iterable[str]) -> list[dict]:
        """Per-endpoint health snapshot for the health and metrics routes."""
        now = self._clock()
        stats = []
        for endpoint in endpoints:
            with self._lock:
                health = self._health.get(endpoint)
                failure_count = health.failure_count if health else 0
                last_failure_at = health.last_failure_at if health else None
            stats.append(
                {
                    "endpoint": endpoint,
                    "failure_count": failure_count,
                    "seconds_since_failure": (
                        round(now - last_failure_at, 3) if last_failure_at is not None else None
                    ),
                    "is_disabled": self.is_disabled(endpoint, now),
                }
            )
        return stats
