"""
Blog API - Access Log Middleware
================================

What:  One log line per request: method, path, status, duration, request
       id, client and (when the auth gate identified one) the user id.
How:   Times call_next(); the level follows the status class so 5xx can be
       alerted on separately from 4xx.

Never logged: request bodies (passwords) and the Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blog_api.middleware.request_id import request_id_var

logger = logging.getLogger("blog_api.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"
        user_id = getattr(request.state, "user_id", None) or "anonymous"
        rid = request_id_var.get()

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms user=%s from %s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            user_id,
            client_ip,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
                "client_ip": client_ip,
                "rid": rid,
            },
        )
        return response
