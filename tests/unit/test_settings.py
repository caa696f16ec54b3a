"""Unit tests for WallfetchSettings and endpoint loading."""

import random
from pathlib import Path

import pytest
import yaml

from wallfetch.config.endpoints import EndpointRegistry, load_endpoints
from wallfetch.config.settings import WallfetchSettings


# ---------------------------------------------------------------------------
# WallfetchSettings
# ---------------------------------------------------------------------------


class TestWallfetchSettings:
    def test_defaults_are_correct(self):
        settings = WallfetchSettings()

        assert settings.log_level == "INFO"
        assert settings.endpoints == []
        assert settings.endpoints_path is None
        assert settings.default_pic_count == 1
        assert settings.permit_pool_size == 3
        assert settings.worker_pool_size == 3
        assert settings.max_retries == 3
        assert settings.retry_delay_seconds == 0.0
        assert settings.transport_timeout_seconds == 10.0
        assert settings.failure_threshold == 3
        assert settings.disable_window_seconds == 300
        assert settings.probe_interval_seconds == 600
        assert settings.min_cooldown_ms == 500
        assert settings.max_cooldown_ms == 5000
        assert settings.max_consecutive_calls == 10
        assert settings.connectivity_host == "1.1.1.1"
        assert settings.connectivity_port == 53
        assert settings.graceful_shutdown_seconds == 60

    def test_env_prefix_is_wallfetch(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("WALLFETCH_PERMIT_POOL_SIZE", "7")
        monkeypatch.setenv("WALLFETCH_LOG_LEVEL", "DEBUG")

        settings = WallfetchSettings()
        assert settings.permit_pool_size == 7
        assert settings.log_level == "DEBUG"

    def test_endpoints_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(
            "WALLFETCH_ENDPOINTS", '["https://a.test/pic","https://b.test/pic"]'
        )

        settings = WallfetchSettings()
        assert settings.endpoints == ["https://a.test/pic", "https://b.test/pic"]

    def test_permit_pool_size_validation(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("WALLFETCH_PERMIT_POOL_SIZE", "0")

        with pytest.raises(Exception):
            WallfetchSettings()

    def test_cooldown_bounds_validation(self):
        with pytest.raises(Exception):
            WallfetchSettings(min_cooldown_ms=2000, max_cooldown_ms=1000)

    def test_equal_cooldown_bounds_allowed(self):
        settings = WallfetchSettings(min_cooldown_ms=1000, max_cooldown_ms=1000)
        assert settings.min_cooldown_ms == settings.max_cooldown_ms


# ---------------------------------------------------------------------------
# load_endpoints
# ---------------------------------------------------------------------------


class TestLoadEndpoints:
    def test_inline_only(self):
        assert load_endpoints(["https://a.test", "https://b.test"]) == [
            "https://a.test",
            "https://b.test",
        ]

    def test_strips_and_drops_blanks(self):
        assert load_endpoints(["  https://a.test  ", "", "   "]) == ["https://a.test"]

    def test_dedupes_in_first_seen_order(self):
        endpoints = ["https://b.test", "https://a.test", "https://b.test"]
        assert load_endpoints(endpoints) == ["https://b.test", "https://a.test"]

    def test_merges_yaml_after_inline(self, tmp_path: Path):
        yaml_file = tmp_path / "endpoints.yaml"
        yaml_file.write_text(
            yaml.dump({"endpoints": ["https://c.test", "https://a.test"]})
        )

        merged = load_endpoints(["https://a.test"], str(yaml_file))

        assert merged == ["https://a.test", "https://c.test"]

    def test_file_not_found_is_ignored(self):
        assert load_endpoints(["https://a.test"], "/nonexistent/endpoints.yaml") == [
            "https://a.test"
        ]

    def test_missing_endpoints_key_is_ignored(self, tmp_path: Path):
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("some_other_key: value\n")

        assert load_endpoints([], str(yaml_file)) == []

    def test_invalid_yaml_is_ignored(self, tmp_path: Path):
        yaml_file = tmp_path / "broken.yaml"
        yaml_file.write_text(": : : not valid yaml [[[")

        assert load_endpoints([], str(yaml_file)) == []

    def test_null_entries_skipped(self, tmp_path: Path):
        yaml_file = tmp_path / "endpoints.yaml"
        yaml_file.write_text("endpoints:\n  - https://a.test\n  -\n")

        assert load_endpoints([], str(yaml_file)) == ["https://a.test"]


# ---------------------------------------------------------------------------
# EndpointRegistry
# ---------------------------------------------------------------------------


class TestEndpointRegistry:
    def test_sequence_behaviour(self):
        registry = EndpointRegistry(["https://a.test", "https://b.test"])

        assert len(registry) == 2
        assert list(registry) == ["https://a.test", "https://b.test"]
        assert "https://a.test" in registry
        assert "https://z.test" not in registry
        assert registry.endpoints == ("https://a.test", "https://b.test")

    def test_choose_draws_from_registry(self):
        registry = EndpointRegistry(["https://a.test", "https://b.test"])
        rng = random.Random(0)
        draws = {registry.choose(rng) for _ in range(50)}

        assert draws == {"https://a.test", "https://b.test"}

    def test_choose_from_empty_raises(self):
        with pytest.raises(IndexError):
            EndpointRegistry([]).choose(random.Random(0))
