"""Health, readiness, and metrics endpoints.

- GET /health — service status + endpoint counts
- GET /readiness — 200 only when a fetch could be attempted right now
- GET /metrics — health tracker, rate governor and executor stats
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from wallfetch.models.responses import ApiResponse


def create_health_router(*, picture_service: Any = None) -> APIRouter:
    """Factory that creates the health router with injected dependencies."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        """Service health check with endpoint counts."""
        stats = picture_service.get_stats() if picture_service else {}
        endpoints = stats.get("endpoints", {})

        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "endpoints_total": endpoints.get("total", 0),
                "endpoints_disabled": endpoints.get("disabled", 0),
                "prober_running": stats.get("prober_running", False),
            },
        ).model_dump()

    @health_router.get("/readiness")
    async def readiness() -> dict:
        """Readiness probe — an unmet fetch precondition renders as its error envelope."""
        if picture_service:
            picture_service.verify()

        return ApiResponse(success=True, data={"ready": True}).model_dump()

    @health_router.get("/metrics")
    async def metrics() -> dict:
        """Operational metrics endpoint."""
        stats = picture_service.get_stats() if picture_service else {}

        return ApiResponse(success=True, data=stats).model_dump()

    return health_router
