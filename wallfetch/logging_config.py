"""Structured JSON logging configuration.

Configures Python logging to emit one JSON object per line with the fields
timestamp, level, logger, message and request_id (the ID of the HTTP request
being served, if any). Fetch-specific fields are added contextually through
``extra`` (endpoint, attempt, error_reason for failed attempts; duration_ms
for completed fetches; cooldown_ms for the rate gate).

Endpoint URLs may carry API keys in their query strings; those values are
redacted before anything is written.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from wallfetch.middleware.request_id import request_id_var


# Query parameters whose values should never reach the logs
_SENSITIVE_PATTERNS = re.compile(
    r"([?&](?:api[_-]?key|apikey|key|token|secret|access[_-]?token|client[_-]?secret)=)[^&\s\"']+",
    re.IGNORECASE,
)

_CONTEXT_FIELDS = ("endpoint", "attempt", "error_reason", "duration_ms", "cooldown_ms")


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None) or request_id_var.get(),
        }

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                value = getattr(record, name)
                entry[name] = self._sanitize(value) if isinstance(value, str) else value

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(
                self.formatException(record.exc_info)
            )

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Mask secret-looking query parameter values."""
        return _SENSITIVE_PATTERNS.sub(r"\1[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
