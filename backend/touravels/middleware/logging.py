"""
TourAvels Backend — Request Logging Middleware
===============================================

What:  One access-log line per HTTP request, naming the resource and record id.
Why:   Replaces uvicorn's access log (silenced in main.setup_logging) with a
       line that carries the request ID, and flags browser calls from
       origins outside the CORS allowlist (CORSMiddleware drops them silently).
How:   Splits /<resource>/<id> paths, measures duration, picks the level by
       status class.

Log line examples:
    PUT touristsSpot id=665f1c2a9d3e4b0012a1b2c3 200 4.2ms [a1b2c3d4] from 10.0.0.7
    GET tourPlans 200 11.8ms [a1b2c3d4] from 10.0.0.7

What we DON'T log: request bodies (plans carry user emails)
"""

import logging
import time
from typing import Iterable, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from touravels.middleware.request_id import request_id_var

logger = logging.getLogger("touravels.access")


def describe_path(path: str) -> Tuple[str, Optional[str]]:
    """
    Split a request path into (resource, record_id).

    "/touristsSpot/abc" → ("touristsSpot", "abc"); "/tourPlans" → ("tourPlans", None);
    "/" → ("/", None).
    """
    resource, _, record_id = path.strip("/").partition("/")
    return resource or "/", record_id or None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs resource, record id, status, duration and request ID for each request.

    Levels:
        5xx → ERROR, 4xx → WARNING, everything else → INFO.
        /health is skipped; the platform polls it constantly.

    Args:
        allowed_origins: CORS allowlist; requests whose Origin header is not
                         in it get an extra WARNING line.
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ()):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        started = time.perf_counter()
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        resource, record_id = describe_path(request.url.path)

        origin = request.headers.get("origin")
        if origin and origin not in self.allowed_origins:
            logger.warning("[%s] CORS blocked for origin: %s", rid, origin)

        response = await call_next(request)

        status = response.status_code
        elapsed_ms = (time.perf_counter() - started) * 1000
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        target = resource if record_id is None else f"{resource} id={record_id}"
        logger.log(
            level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            target,
            status,
            elapsed_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "resource": resource,
                "record_id": record_id,
                "status": status,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
