"""Picture service — the public face of the resilient-fetch engine.

Wires the registry, health tracker, rate governor, executor, pipeline,
orchestrator and prober together and exposes the produced interface:
``batch_collect``, ``race_first_success``, ``list_disabled_endpoints`` and
``shutdown``.
"""

from __future__ import annotations

import logging
import random

from wallfetch.config.endpoints import EndpointRegistry, load_endpoints
from wallfetch.config.settings import WallfetchSettings
from wallfetch.integration.reachability import Reachability, SocketReachability
from wallfetch.integration.transport import HttpTransport, Transport
from wallfetch.resilience.health_tracker import EndpointHealthTracker
from wallfetch.resilience.rate_governor import CallRateGovernor
from wallfetch.services.executor import BoundedExecutor
from wallfetch.services.orchestrator import RequestOrchestrator
from wallfetch.services.pipeline import FetchPipeline
from wallfetch.services.prober import HealthProber

logger = logging.getLogger(__name__)


class PictureService:
    """Facade over the fetch engine.

    Create one per process with ``from_settings`` (inside the event loop),
    call ``start()`` to launch the health prober and ``shutdown()`` on exit.
    """

    def __init__(
        self,
        *,
        registry: EndpointRegistry,
        health_tracker: EndpointHealthTracker,
        governor: CallRateGovernor,
        executor: BoundedExecutor,
        pipeline: FetchPipeline,
        orchestrator: RequestOrchestrator,
        prober: HealthProber,
        transport: Transport,
        graceful_shutdown_seconds: float = 60,
    ) -> None:
        self.registry = registry
        self.health_tracker = health_tracker
        self.governor = governor
        self.executor = executor
        self.pipeline = pipeline
        self.orchestrator = orchestrator
        self.prober = prober
        self._transport = transport
        self._graceful_shutdown_seconds = graceful_shutdown_seconds

    @classmethod
    def from_settings(
        cls,
        settings: WallfetchSettings,
        *,
        transport: Transport | None = None,
        reachability: Reachability | None = None,
        rng: random.Random | None = None,
    ) -> PictureService:
        registry = EndpointRegistry(load_endpoints(settings.endpoints, settings.endpoints_path))
        health_tracker = EndpointHealthTracker(
            failure_threshold=settings.failure_threshold,
            disable_window_seconds=settings.disable_window_seconds,
        )
        governor = CallRateGovernor(
            min_cooldown=settings.min_cooldown_ms / 1000,
            max_cooldown=settings.max_cooldown_ms / 1000,
            max_consecutive_calls=settings.max_consecutive_calls,
        )
        executor = BoundedExecutor(
            max_in_flight=settings.permit_pool_size,
            worker_pool_size=settings.worker_pool_size,
        )
        transport = transport or HttpTransport(timeout_seconds=settings.transport_timeout_seconds)
        pipeline = FetchPipeline(
            transport=transport,
            health_tracker=health_tracker,
            max_retries=settings.max_retries,
            retry_delay_seconds=settings.retry_delay_seconds,
        )
        reachability = reachability or SocketReachability(
            host=settings.connectivity_host,
            port=settings.connectivity_port,
            timeout_seconds=settings.connectivity_timeout_seconds,
        )
        orchestrator = RequestOrchestrator(
            registry=registry,
            health_tracker=health_tracker,
            governor=governor,
            executor=executor,
            pipeline=pipeline,
            reachability=reachability,
            rng=rng,
        )
        prober = HealthProber(
            registry=registry,
            health_tracker=health_tracker,
            pipeline=pipeline,
            executor=executor,
            interval_seconds=settings.probe_interval_seconds,
        )
        return cls(
            registry=registry,
            health_tracker=health_tracker,
            governor=governor,
            executor=executor,
            pipeline=pipeline,
            orchestrator=orchestrator,
            prober=prober,
            transport=transport,
            graceful_shutdown_seconds=settings.graceful_shutdown_seconds,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.prober.start()

    async def shutdown(self, timeout: float | None = None) -> None:
        """Stop probing, drain in-flight fetches, then close the transport."""
        await self.prober.stop()
        await self.executor.drain(
            timeout=self._graceful_shutdown_seconds if timeout is None else timeout
        )
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()
        logger.info("Picture service shut down")

    # ------------------------------------------------------------------
    # Produced interface
    # ------------------------------------------------------------------

    def verify(self) -> None:
        self.orchestrator.verify()

    async def batch_collect(self, count: int) -> list[str]:
        return await self.orchestrator.batch_collect(count)

    async def race_first_success(self, max_attempts: int) -> str | None:
        return await self.orchestrator.race_first_success(max_attempts)

    def list_disabled_endpoints(self) -> set[str]:
        return self.orchestrator.list_disabled_endpoints()

    def get_stats(self) -> dict:
        endpoint_stats = self.health_tracker.get_stats(self.registry)
        return {
            "endpoints": {
                "total": len(self.registry),
                "disabled": sum(1 for e in endpoint_stats if e["is_disabled"]),
                "health": endpoint_stats,
            },
            "rate_governor": self.governor.get_stats(),
            "executor": self.executor.get_stats(),
            "prober_running": self.prober.running,
        }
