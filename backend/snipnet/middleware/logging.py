"""
SnipNet Backend - Request Logging Middleware
=============================================

What:  One access log line per request on the `snipnet.access` logger:
       method, path, status, duration, request id, client.
Who:   Added after RequestIDMiddleware so the request id is already set.

What we log vs what we DON'T log (privacy):
    Log: method, path, status, duration, client IP, request id, whether the
         caller identity header was present
    Don't log: request bodies (comment text), header values
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snipnet.config import settings
from snipnet.middleware.request_id import request_id_var

logger = logging.getLogger("snipnet.access")

# Probed every few seconds by load balancers
QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        authenticated = settings.user_id_header in request.headers

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] from %s%s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            rid,
            client_ip,
            "" if authenticated else " (anonymous)",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
