"""
JobTrail Backend — Request Logging Middleware
===============================================

What:  One access log line per request: method, path, status, duration.
How:   Level follows the status class (5xx ERROR, 4xx WARNING, else INFO).
       Health checks are skipped; they arrive every few seconds from probes.

What is never logged: request bodies (résumé payloads, PINs) and the
Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from jobtrail.middleware.rate_limit import client_ip
from jobtrail.middleware.request_id import request_id_var

logger = logging.getLogger("jobtrail.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request with its status code and duration in ms."""

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        ip = client_ip(request)
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": ip,
            },
        )

        return response
