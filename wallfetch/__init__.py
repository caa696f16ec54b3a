"""Wallfetch — resilient image-URL fetching from unreliable endpoints."""

__version__ = "1.0.0"
