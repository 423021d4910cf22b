"""
TourAvels Backend — Request ID Middleware
==========================================

What:  Gives every request a short correlation ID and echoes it in X-Request-ID.
Why:   Error bodies carry the same ID, so a frontend bug report can be matched
       to the server log line for the failing store call.
How:   Uses the client's X-Request-ID when present, otherwise 8 chars of a UUID4.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns request.state.request_id and request_id_var for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
