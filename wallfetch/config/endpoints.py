"""Endpoint registry and its YAML/env loader.

Endpoints are the interchangeable remote sources that answer with an image
URL. They are loaded once at startup, from the ``WALLFETCH_ENDPOINTS`` list
and an optional YAML file of the form::

    endpoints:
      - https://api.example.com/random
      - https://img.example.org/today?format=json

and are read-only for the rest of the process lifetime.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


def _read_yaml_endpoints(yaml_path: str) -> list[str]:
    """Return the ``endpoints`` list from a YAML file, or [] when unusable."""
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Endpoints file not found at %s — ignoring", yaml_path)
        return []

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse endpoints YAML at %s: %s", yaml_path, exc)
        return []

    if not isinstance(raw, dict) or not isinstance(raw.get("endpoints"), list):
        logger.warning("Endpoints YAML at %s has no 'endpoints' list — ignoring", yaml_path)
        return []

    return [str(item) for item in raw["endpoints"] if item is not None]


def load_endpoints(
    endpoints: Iterable[str] = (),
    yaml_path: str | None = None,
) -> list[str]:
    """Merge inline endpoints with those from *yaml_path*.

    Blank entries are dropped and duplicates removed, keeping first-seen order.
    """
    candidates = list(endpoints)
    if yaml_path:
        candidates.extend(_read_yaml_endpoints(yaml_path))

    merged: list[str] = []
    seen: set[str] = set()
    for raw in candidates:
        endpoint = raw.strip()
        if not endpoint or endpoint in seen:
            continue
        seen.add(endpoint)
        merged.append(endpoint)

    logger.info("Loaded %d endpoints", len(merged))
    return merged


class EndpointRegistry:
    """Immutable, ordered set of endpoint identifiers."""

    def __init__(self, endpoints: Sequence[str]) -> None:
        self._endpoints: tuple[str, ...] = tuple(endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def __iter__(self) -> Iterator[str]:
        return iter(self._endpoints)

    def __contains__(self, endpoint: object) -> bool:
        return endpoint in self._endpoints

    @property
    def endpoints(self) -> tuple[str, ...]:
        return self._endpoints

    def choose(self, rng: random.Random) -> str:
        """Pick one endpoint uniformly at random (with replacement across calls)."""
        if not self._endpoints:
            raise IndexError("Cannot choose from an empty endpoint registry")
        return rng.choice(self._endpoints)
