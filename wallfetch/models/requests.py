"""Pydantic request models for the picture endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BatchCollectRequest(BaseModel):
    """Collect up to ``count`` image URLs, awaiting every attempt."""

    count: int | None = Field(default=None, ge=1, le=100)


class RaceRequest(BaseModel):
    """Return the first image URL out of up to ``max_attempts`` parallel attempts."""

    max_attempts: int | None = Field(default=None, ge=1, le=100)
