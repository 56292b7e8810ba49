"""
ClientHub Backend - Request ID Middleware
==========================================

What:  Assigns a correlation ID to each incoming request and returns it in a header.
How:   Reuses a client-sent X-Request-ID or generates a short UUID, stores it in a
       ContextVar (for loggers and exception handlers) and on request.state.
Who:   Applied to every request via Starlette middleware.
When:  Outermost middleware, before logging and route handling.

Every error body carries the same ID as `request_id`, so an operator can match
a report from the admin UI to the server log line.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the client when present and reasonably short
        2. Otherwise generate an 8-character UUID prefix
        3. Expose it via request_id_var and request.state.request_id
        4. Echo it in the X-Request-ID response header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")
        if not rid or len(rid) > _MAX_CLIENT_ID_LENGTH:
            rid = str(uuid.uuid4())[:8]

        # Not reset afterwards: the catch-all 500 handler runs outside this middleware
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
