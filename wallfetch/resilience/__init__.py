"""Resilience components — endpoint health and the batch call-rate gate."""

from wallfetch.resilience.health_tracker import EndpointHealth, EndpointHealthTracker
from wallfetch.resilience.rate_governor import CallRateGovernor, RateState

__all__ = [
    "CallRateGovernor",
    "EndpointHealth",
    "EndpointHealthTracker",
    "RateState",
]
