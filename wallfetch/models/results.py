"""Tagged outcome of one fetch pipeline run."""

from __future__ import annotations

from dataclasses import dataclass

from wallfetch.middleware.error_handler import RetriesExhaustedError


@dataclass(frozen=True)
class FetchResult:
    """Either a non-empty image URL or the error that ended the run."""

    endpoint: str
    url: str | None = None
    error: RetriesExhaustedError | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return bool(self.url)

    @classmethod
    def success(cls, endpoint: str, url: str, attempts: int) -> FetchResult:
        if not url:
            raise ValueError("A successful FetchResult needs a non-empty URL")
        return cls(endpoint=endpoint, url=url, attempts=attempts)

    @classmethod
    def failure(
        cls, endpoint: str, error: RetriesExhaustedError, attempts: int
    ) -> FetchResult:
        return cls(endpoint=endpoint, error=error, attempts=attempts)
