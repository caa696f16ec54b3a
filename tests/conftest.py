"""Shared test fixtures for the wallfetch test suite."""

from __future__ import annotations

import os

import pytest

from tests.fakes import ManualClock
from wallfetch.config.endpoints import EndpointRegistry
from wallfetch.config.settings import WallfetchSettings
from wallfetch.resilience.health_tracker import EndpointHealthTracker
from wallfetch.resilience.rate_governor import CallRateGovernor
from wallfetch.services.executor import BoundedExecutor


# ---------------------------------------------------------------------------
# Keep developer WALLFETCH_* variables out of the tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_wallfetch_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("WALLFETCH_"):
            monkeypatch.delenv(key)


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------

ENDPOINTS = [
    "https://api.one.test/pic",
    "https://api.two.test/pic",
    "https://api.three.test/pic",
]


@pytest.fixture
def settings() -> WallfetchSettings:
    """Test settings with safe defaults."""
    return WallfetchSettings(
        endpoints=ENDPOINTS,
        permit_pool_size=2,
        worker_pool_size=2,
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def registry() -> EndpointRegistry:
    return EndpointRegistry(ENDPOINTS)


@pytest.fixture
def health_tracker(clock: ManualClock) -> EndpointHealthTracker:
    return EndpointHealthTracker(failure_threshold=3, disable_window_seconds=300, clock=clock)


@pytest.fixture
def governor(clock: ManualClock) -> CallRateGovernor:
    return CallRateGovernor(clock=clock)


@pytest.fixture
async def executor():
    executor = BoundedExecutor(max_in_flight=2, worker_pool_size=2)
    yield executor
    await executor.drain(timeout=5)
