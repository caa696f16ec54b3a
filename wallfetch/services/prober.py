"""Background health prober for failing endpoints.

Every ``interval_seconds`` the prober re-runs the fetch pipeline once against
each endpoint at or over the failure threshold. A successful probe resets the
endpoint's failure counter. A failed probe is not recorded against the
endpoint, so the disable window still lapses on its own between probes.
"""

from __future__ import annotations

import asyncio
import functools
import logging

from wallfetch.config.endpoints import EndpointRegistry
from wallfetch.resilience.health_tracker import EndpointHealthTracker
from wallfetch.services.executor import BoundedExecutor
from wallfetch.services.pipeline import FetchPipeline

logger = logging.getLogger(__name__)


class HealthProber:
    """Periodic rehabilitation of failing endpoints."""

    def __init__(
        self,
        *,
        registry: EndpointRegistry,
        health_tracker: EndpointHealthTracker,
        pipeline: FetchPipeline,
        executor: BoundedExecutor,
        interval_seconds: float = 600,
    ) -> None:
        self._registry = registry
        self._health = health_tracker
        self._pipeline = pipeline
        self._executor = executor
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the probe loop as a background task on the running loop."""
        if self.running:
            logger.warning("Health prober already running — skipping")
            return
        self._task = asyncio.create_task(self.run(), name="wallfetch-health-prober")
        logger.info("Health prober started (interval=%ss)", self._interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Health prober stopped")

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            await self.probe_once()

    async def probe_once(self) -> list[str]:
        """Probe every failing endpoint once; return the ones rehabilitated."""
        restored: list[str] = []
        for endpoint in self._health.list_failing(self._registry):
            result = await self._executor.run_direct(
                functools.partial(self._pipeline.fetch_one, record_failures=False), endpoint
            )
            if result.ok:
                self._health.rehabilitate(endpoint)
                restored.append(endpoint)
                logger.info(
                    "Endpoint %s is available again, failure counter reset",
                    endpoint,
                    extra={"endpoint": endpoint},
                )
            else:
                logger.debug("Endpoint %s still unavailable", endpoint)
        return restored
