"""Response envelope shared by every wallfetch route.

Shape: { success: bool, data: T | None, error: str | None, meta: dict | None }
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for route responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None
