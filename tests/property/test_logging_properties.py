"""Property tests for structured logging.

Every record renders as one JSON object with the base fields, fetch context
passes through unchanged, and secret-looking query values on endpoint URLs
never reach the output.
"""

from __future__ import annotations

import json
import logging

from hypothesis import given, settings, strategies as st

from wallfetch.logging_config import JsonFormatter


# --- Strategies ---

messages = st.text(min_size=1, max_size=100, alphabet="abcdefghijklmnopqrstuvwxyz0123456789 ._-/")
levels = st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
endpoints = st.from_regex(r"https://[a-z]{3,10}\.[a-z]{2,4}/[a-z0-9]{1,10}", fullmatch=True)
attempts = st.integers(min_value=1, max_value=4)
durations = st.floats(min_value=0.1, max_value=60000.0, allow_nan=False, allow_infinity=False)
secret_params = st.sampled_from(
    ["api_key", "apikey", "api-key", "key", "token", "secret", "access_token", "client_secret"]
)
secrets = st.text(min_size=8, max_size=32, alphabet="JKQVXZ")


def _make_record(message: str, level: str = "INFO", **extra: object) -> logging.LogRecord:
    """Create a LogRecord with optional extra attributes."""
    record = logging.LogRecord(
        name="wallfetch.test",
        level=getattr(logging, level),
        pathname="test.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# --- Log shape ---

@settings(max_examples=100)
@given(message=messages, level=levels)
def test_log_entry_is_json_with_base_fields(message: str, level: str) -> None:
    parsed = json.loads(JsonFormatter().format(_make_record(message, level=level)))

    assert parsed["level"] == level
    assert parsed["logger"] == "wallfetch.test"
    assert parsed["message"] == message
    assert "timestamp" in parsed


@settings(max_examples=100)
@given(
    message=messages,
    endpoint=endpoints,
    attempt=attempts,
    error_reason=messages,
    duration_ms=durations,
)
def test_failed_attempt_fields_pass_through(
    message: str,
    endpoint: str,
    attempt: int,
    error_reason: str,
    duration_ms: float,
) -> None:
    record = _make_record(
        message,
        level="WARNING",
        endpoint=endpoint,
        attempt=attempt,
        error_reason=error_reason,
        duration_ms=duration_ms,
    )
    parsed = json.loads(JsonFormatter().format(record))

    assert parsed["endpoint"] == endpoint
    assert parsed["attempt"] == attempt
    assert parsed["error_reason"] == error_reason
    assert parsed["duration_ms"] == duration_ms


# --- Redaction ---

@settings(max_examples=100)
@given(endpoint=endpoints, param=secret_params, secret=secrets)
def test_endpoint_secrets_never_logged(endpoint: str, param: str, secret: str) -> None:
    url = f"{endpoint}?format=json&{param}={secret}"
    record = _make_record(f"Calling {url}", endpoint=url)
    output = JsonFormatter().format(record)

    assert secret not in output
    parsed = json.loads(output)
    assert parsed["endpoint"] == f"{endpoint}?format=json&{param}=[REDACTED]"
