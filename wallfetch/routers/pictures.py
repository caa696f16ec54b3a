"""Picture URL endpoints.

- POST /api/v1/pictures/batch — collect URLs from ``count`` parallel fetches
- POST /api/v1/pictures/race — first URL out of ``max_attempts`` parallel fetches
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from wallfetch.models.requests import BatchCollectRequest, RaceRequest
from wallfetch.models.responses import ApiResponse

logger = logging.getLogger(__name__)


def create_pictures_router(
    *,
    picture_service: Any = None,
    default_count: int = 1,
) -> APIRouter:
    """Factory that creates the pictures router with injected dependencies.

    Parameters
    ----------
    picture_service:
        PictureService that runs the fetches.
    default_count:
        Used when a request body leaves ``count`` / ``max_attempts`` unset.
    """
    pictures_router = APIRouter(prefix="/api/v1/pictures", tags=["pictures"])

    @pictures_router.post("/batch")
    async def batch_collect(body: BatchCollectRequest) -> dict:
        """Await every fetch and return all URLs obtained (possibly none)."""
        count = body.count or default_count
        urls = await picture_service.batch_collect(count)

        return ApiResponse(
            success=bool(urls),
            data={"urls": urls, "requested": count},
            error=None if urls else "No image URL obtained",
        ).model_dump()

    @pictures_router.post("/race")
    async def race_first_success(body: RaceRequest) -> dict:
        """Return the first URL any fetch produces."""
        max_attempts = body.max_attempts or default_count
        url = await picture_service.race_first_success(max_attempts)

        return ApiResponse(
            success=url is not None,
            data={"url": url, "max_attempts": max_attempts},
            error=None if url is not None else "No image URL obtained",
        ).model_dump()

    return pictures_router
