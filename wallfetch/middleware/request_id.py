"""Request ID middleware.

Generates (or propagates) a request ID for every incoming request, binds it
to ``request_id_var`` for the duration of the request so log records emitted
while serving it (worker threads included) can carry it, and echoes it in an
``X-Request-ID`` response header.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

request_id_var: ContextVar[str | None] = ContextVar("wallfetch_request_id", default=None)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID to each request.

    A caller-supplied ``X-Request-ID`` header is reused; otherwise a new
    UUID4 is generated. The ID is stored in ``request.state.request_id``.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response
