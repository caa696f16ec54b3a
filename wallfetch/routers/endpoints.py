"""Endpoint registry inspection.

- GET /api/v1/endpoints — every endpoint with its failure state
- GET /api/v1/endpoints/disabled — endpoints currently disabled
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from wallfetch.models.responses import ApiResponse


def create_endpoints_router(*, picture_service: Any = None) -> APIRouter:
    """Factory that creates the endpoints router with injected dependencies."""
    endpoints_router = APIRouter(prefix="/api/v1/endpoints", tags=["endpoints"])

    @endpoints_router.get("")
    async def list_endpoints() -> dict:
        stats = picture_service.get_stats()["endpoints"]
        return ApiResponse(
            success=True,
            data=stats["health"],
            meta={"total": stats["total"], "disabled": stats["disabled"]},
        ).model_dump()

    @endpoints_router.get("/disabled")
    async def list_disabled() -> dict:
        disabled = sorted(picture_service.list_disabled_endpoints())
        return ApiResponse(
            success=True,
            data=disabled,
            meta={"count": len(disabled)},
        ).model_dump()

    return endpoints_router
