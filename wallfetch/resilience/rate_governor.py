"""Global adaptive cooldown gate for batch collection.

A single gate guards how often batch collection may start. Each accepted call
bumps a consecutive-call counter; once more than ``max_consecutive_calls``
have been accepted the cooldown doubles (capped at ``max_cooldown``) and the
counter restarts. Any other accepted call drops the cooldown straight back to
``min_cooldown``.

Key behaviors:
- check() raises RateLimitedError while inside the cooldown, without touching state
- the first call ever made is always accepted
- race-style fetches never go through this gate
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from wallfetch.middleware.error_handler import RateLimitedError

logger = logging.getLogger(__name__)

MIN_COOLDOWN_SECONDS = 0.5
MAX_COOLDOWN_SECONDS = 5.0
MAX_CONSECUTIVE_CALLS = 10


@dataclass
class RateState:
    """Mutable gate state."""

    cooldown: float
    last_call_at: float | None = None  # time.monotonic() of the last accepted call
    consecutive_calls: int = 0


class CallRateGovernor:
    """Adaptive cooldown between accepted batch calls.

    Args:
        min_cooldown: Cooldown in seconds after an ordinary accepted call.
        max_cooldown: Upper bound in seconds for the doubled cooldown.
        max_consecutive_calls: Accepted calls tolerated before doubling.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        min_cooldown: float = MIN_COOLDOWN_SECONDS,
        max_cooldown: float = MAX_COOLDOWN_SECONDS,
        max_consecutive_calls: int = MAX_CONSECUTIVE_CALLS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_cooldown = min_cooldown
        self._max_cooldown = max_cooldown
        self._max_consecutive_calls = max_consecutive_calls
        self._clock = clock
        self._state = RateState(cooldown=min_cooldown)
        self._lock = threading.Lock()

    @property
    def state(self) -> RateState:
        return self._state

    def check(self, now: float | None = None) -> None:
        """Accept a call at *now* or raise ``RateLimitedError``."""
        if now is None:
            now = self._clock()

        with self._lock:
            state = self._state
            if state.last_call_at is not None:
                elapsed = now - state.last_call_at
                if elapsed < state.cooldown:
                    raise RateLimitedError(
                        f"Batch collect may not be called more than once every "
                        f"{state.cooldown:g}s",
                        retry_after=state.cooldown - elapsed,
                    )

            state.consecutive_calls += 1
            if state.consecutive_calls > self._max_consecutive_calls:
                state.cooldown = min(state.cooldown * 2, self._max_cooldown)
                state.consecutive_calls = 0
            else:
                state.cooldown = self._min_cooldown
            state.last_call_at = now
            cooldown = state.cooldown

        logger.debug(
            "Batch cooldown set to %.3fs",
            cooldown,
            extra={"cooldown_ms": int(cooldown * 1000)},
        )

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "cooldown_ms": int(self._state.cooldown * 1000),
                "consecutive_calls": self._state.consecutive_calls,
                "min_cooldown_ms": int(self._min_cooldown * 1000),
                "max_cooldown_ms": int(self._max_cooldown * 1000),
            }
