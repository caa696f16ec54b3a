"""Pydantic Settings for the wallfetch service.

All environment variables use the WALLFETCH_ prefix.
Example: WALLFETCH_LOG_LEVEL=DEBUG, WALLFETCH_PERMIT_POOL_SIZE=5
List values are read as JSON: WALLFETCH_ENDPOINTS='["https://api.example/pic"]'
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class WallfetchSettings(BaseSettings):
    """Wallfetch configuration validated from environment variables."""

    # Service
    log_level: str = "INFO"

    # Endpoint registry
    endpoints: list[str] = []  # Inline endpoint URLs
    endpoints_path: str | None = None  # Optional YAML file with an `endpoints:` list
    default_pic_count: int = Field(default=1, ge=1)

    # Bounded concurrency
    permit_pool_size: int = Field(default=3, ge=1, le=64)
    worker_pool_size: int = Field(default=3, ge=1, le=64)

    # Fetch pipeline
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=0.0, ge=0.0)
    transport_timeout_seconds: float = Field(default=10.0, gt=0.0)

    # Endpoint health
    failure_threshold: int = Field(default=3, ge=1)
    disable_window_seconds: int = Field(default=300, ge=1)  # 5 minutes
    probe_interval_seconds: int = Field(default=600, ge=1)  # 10 minutes

    # Call-rate governor (batch collect only)
    min_cooldown_ms: int = Field(default=500, ge=0)
    max_cooldown_ms: int = Field(default=5000, ge=0)
    max_consecutive_calls: int = Field(default=10, ge=1)

    # Network reachability
    connectivity_host: str = "1.1.1.1"
    connectivity_port: int = Field(default=53, ge=1, le=65535)
    connectivity_timeout_seconds: float = Field(default=3.0, gt=0.0)

    # Shutdown
    graceful_shutdown_seconds: int = Field(default=60, ge=0)

    model_config = {"env_prefix": "WALLFETCH_"}

    @model_validator(mode="after")
    def _check_cooldown_bounds(self) -> WallfetchSettings:
        if self.max_cooldown_ms < self.min_cooldown_ms:
            raise ValueError("max_cooldown_ms must be >= min_cooldown_ms")
        return self
