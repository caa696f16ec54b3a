"""Configuration module — settings and the endpoint registry."""

from wallfetch.config.endpoints import EndpointRegistry, load_endpoints
from wallfetch.config.settings import WallfetchSettings

__all__ = [
    "EndpointRegistry",
    "WallfetchSettings",
    "load_endpoints",
]
