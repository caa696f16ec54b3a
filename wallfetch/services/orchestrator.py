"""Request orchestrator — batch-collect and race-first-success fetch modes.

Both modes start with ``verify()``: network reachable, at least one endpoint
configured, and not every endpoint disabled. A failed precondition is logged
and turned into an empty result without touching any endpoint.

- ``batch_collect(count)`` also passes the call-rate governor, draws ``count``
  endpoints at random with replacement from the full set (disabled endpoints
  included), runs them all, and returns every URL obtained in completion order.
- ``race_first_success(max_attempts)`` skips the governor, drops any drawn
  endpoint that is currently disabled, runs the rest, and returns the first
  URL to arrive. Slower attempts are left to finish on their own so their
  health updates still land.
"""

from __future__ import annotations

import asyncio
import logging
import random

from wallfetch.config.endpoints import EndpointRegistry
from wallfetch.integration.reachability import Reachability
from wallfetch.middleware.error_handler import (
    AllEndpointsDisabledError,
    NoEndpointsConfiguredError,
    NoNetworkError,
    PreconditionError,
)
from wallfetch.resilience.health_tracker import EndpointHealthTracker
from wallfetch.resilience.rate_governor import CallRateGovernor
from wallfetch.services.executor import BoundedExecutor
from wallfetch.services.pipeline import FetchPipeline

logger = logging.getLogger(__name__)


class RequestOrchestrator:
    """Selects endpoints and coordinates concurrent pipeline runs.

    Dependencies are injected via the constructor so the orchestrator is
    testable without real endpoints or network calls.
    """

    def __init__(
        self,
        *,
        registry: EndpointRegistry,
        health_tracker: EndpointHealthTracker,
        governor: CallRateGovernor,
        executor: BoundedExecutor,
        pipeline: FetchPipeline,
        reachability: Reachability,
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry
        self._health = health_tracker
        self._governor = governor
        self._executor = executor
        self._pipeline = pipeline
        self._reachability = reachability
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def verify(self) -> None:
        """Raise the first unmet fetch precondition, if any."""
        if not self._reachability.is_connected():
            raise NoNetworkError()
        if len(self._registry) == 0:
            raise NoEndpointsConfiguredError()
        if len(self.list_disabled_endpoints()) == len(self._registry):
            raise AllEndpointsDisabledError()

    def list_disabled_endpoints(self) -> set[str]:
        return self._health.list_disabled(self._registry)

    # ------------------------------------------------------------------
    # Fetch modes
    # ------------------------------------------------------------------

    async def batch_collect(self, count: int) -> list[str]:
        """Run ``count`` fetches and return every URL obtained."""
        if count < 1:
            raise ValueError("count must be a positive integer")

        try:
            self.verify()
            self._governor.check()
            endpoints = [self._registry.choose(self._rng) for _ in range(count)]
            tasks = [self._executor.submit(self._pipeline.fetch_one, e) for e in endpoints]
        except PreconditionError as exc:
            logger.warning("Batch collect skipped: %s", exc.message)
            return []

        urls: list[str] = []
        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            if result.ok:
                urls.append(result.url)
            else:
                logger.info(
                    "Dropping failed fetch from %s: %s",
                    result.endpoint,
                    result.error.message if result.error else "unknown error",
                    extra={"endpoint": result.endpoint},
                )

        logger.info("Batch collect obtained %d/%d URLs", len(urls), count)
        return urls

    async def race_first_success(self, max_attempts: int) -> str | None:
        """Return the first URL produced by up to ``max_attempts`` parallel fetches."""
        if max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer")

        try:
            self.verify()
            candidates: list[str] = []
            for _ in range(max_attempts):
                endpoint = self._registry.choose(self._rng)
                if self._health.is_disabled(endpoint):
                    logger.debug("Skipping disabled endpoint %s", endpoint)
                    continue
                candidates.append(endpoint)

            if not candidates:
                logger.warning("Race skipped: every drawn endpoint was disabled")
                return None

            tasks = [self._executor.submit(self._pipeline.fetch_one, e) for e in candidates]
        except PreconditionError as exc:
            logger.warning("Race skipped: %s", exc.message)
            return None

        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            if result.ok:
                logger.debug(
                    "Race won by %s",
                    result.endpoint,
                    extra={"endpoint": result.endpoint},
                )
                return result.url

        logger.error("All %d race attempts failed", len(tasks))
        return None
