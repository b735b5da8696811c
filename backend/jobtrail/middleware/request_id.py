"""
JobTrail Backend — Request ID Middleware
==========================================

What:  Assigns a correlation id to each request and echoes it in X-Request-ID.
How:   Uses the client's X-Request-ID when present (a device can tag a sync
       attempt and find it in server logs), otherwise a short uuid4 prefix.
       The id is stored in a ContextVar so loggers and the exception handlers
       can read it without the request object.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
