"""
Combs of Honey — Request ID Middleware
=======================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   Reuses the client's X-Request-ID header or generates a short UUID,
       stores it in a ContextVar (read by loggers and error handlers), tags the
       active server span with it, and returns it as X-Request-ID.
Who:   Applied to every request via Starlette middleware.
When:  Runs inside TracingMiddleware, so the server span is already current.
"""

import uuid
from contextvars import ContextVar

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local storage for the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request.

    Behavior:
        1. Use the client's X-Request-ID header if present
        2. Otherwise generate the first 8 characters of a UUID4
        3. Store in ContextVar and request.state
        4. Set `request.id` on the current span
        5. Add to response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])

        request_id_var.set(rid)
        request.state.request_id = rid
        trace.get_current_span().set_attribute("request.id", rid)

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid

        return response
