"""Bounded concurrency executor — permit pool in front of a worker thread pool.

Blocking pipeline runs are handed to a fixed-size ``ThreadPoolExecutor`` so
they execute in parallel. An ``asyncio.Semaphore`` caps how many of them may
be in flight at once across every fetch mode. The permit is taken before the
work is scheduled and released when it finishes, success or failure, exactly
once per acquisition.

Submitted work is wrapped in asyncio tasks that the executor keeps hold of,
so a caller may stop awaiting a task (race mode) while it still runs to
completion. ``drain()`` gives those tasks a bounded grace period on shutdown.
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from wallfetch.middleware.error_handler import ServiceShuttingDownError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedExecutor:
    """Permit-gated access to a worker thread pool.

    Parameters
    ----------
    max_in_flight:
        Permit pool capacity; the most pipeline runs allowed at once.
    worker_pool_size:
        Number of worker threads.
    """

    def __init__(self, *, max_in_flight: int = 3, worker_pool_size: int = 3) -> None:
        self._capacity = max_in_flight
        self._permits = asyncio.Semaphore(max_in_flight)
        self._pool = ThreadPoolExecutor(
            max_workers=worker_pool_size, thread_name_prefix="wallfetch-worker"
        )
        self._worker_pool_size = worker_pool_size
        self._tasks: set[asyncio.Task] = set()

        # Draining flag: when True, submit() rejects new work
        self._draining = False

        # Runs currently holding a permit
        self._active = 0
        self._completed_count = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(self, fn: Callable[..., T], *args: object) -> asyncio.Task[T]:
        """Schedule ``fn(*args)`` behind a permit and return its task.

        Must be called from inside the running event loop.

        Raises
        ------
        ServiceShuttingDownError
            If the executor is draining.
        """
        if self._draining:
            raise ServiceShuttingDownError()

        task = asyncio.create_task(self._run_with_permit(fn, *args))
        self._track(task)
        return task

    async def run_direct(self, fn: Callable[..., T], *args: object) -> T:
        """Run ``fn(*args)`` on the worker pool without taking a permit."""
        if self._draining:
            raise ServiceShuttingDownError()

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, self._bind_context(fn, *args))

    async def drain(self, timeout: float = 60.0) -> None:
        """Stop accepting work, wait up to *timeout* for in-flight runs, cancel the rest."""
        self._draining = True
        logger.info("Draining executor (in_flight=%d, timeout=%.1fs)…", len(self._tasks), timeout)

        if self._tasks:
            _done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
            for task in pending:
                task.cancel()
            if pending:
                logger.warning("Cancelled %d fetches still running at shutdown", len(pending))
                await asyncio.gather(*pending, return_exceptions=True)

        self._pool.shutdown(wait=False, cancel_futures=True)
        logger.info("Executor drained")

    def get_stats(self) -> dict:
        return {
            "permit_capacity": self._capacity,
            "worker_pool_size": self._worker_pool_size,
            "in_flight": len(self._tasks),
            "active": self._active,
            "completed_count": self._completed_count,
            "draining": self._draining,
        }

    @property
    def active(self) -> int:
        return self._active

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _bind_context(fn: Callable[..., T], *args: object) -> Callable[[], T]:
        # Worker threads see the submitting task's context variables (request ID)
        return functools.partial(contextvars.copy_context().run, fn, *args)

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_with_permit(self, fn: Callable[..., T], *args: object) -> T:
        async with self._permits:
            self._active += 1
            try:
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(self._pool, self._bind_context(fn, *args))
            finally:
                self._active -= 1
                self._completed_count += 1
