"""Network reachability check used before any fetch is attempted."""

from __future__ import annotations

import logging
import socket
from typing import Protocol

logger = logging.getLogger(__name__)


class Reachability(Protocol):
    def is_connected(self) -> bool: ...


class SocketReachability:
    """Treat the network as up when a TCP connection to ``host:port`` succeeds."""

    def __init__(self, host: str = "1.1.1.1", port: int = 53, timeout_seconds: float = 3.0) -> None:
        self._host = host
        self._port = port
        self._timeout_seconds = timeout_seconds

    def is_connected(self) -> bool:
        try:
            with socket.create_connection((self._host, self._port), timeout=self._timeout_seconds):
                return True
        except OSError as exc:
            logger.debug("Connectivity probe to %s:%d failed: %s", self._host, self._port, exc)
            return False
