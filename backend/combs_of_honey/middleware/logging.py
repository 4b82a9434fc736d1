"""
Combs of Honey — Request Logging Middleware
============================================

What:  One access-log line per HTTP request.
How:   Measures the request duration and logs method, path, status, duration,
       request ID and client IP, plus the trace ID of the server span so log
       lines can be matched to traces.
Who:   Applied to every request via Starlette middleware.
When:  After RequestIDMiddleware (uses the request ID for correlation).

Log line:
    GET /combs/1/honey/acacia 200 4.2ms [1f0c2a9e] from 127.0.0.1

Level by status class:
    5xx → ERROR, 4xx → WARNING, otherwise INFO.
    Request bodies are never logged.
"""

import logging
import time

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from combs_of_honey.middleware.request_id import request_id_var

logger = logging.getLogger("combs_of_honey.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration of each request.

    GET /health is not logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        # request.client may be None in testing
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        span_context = trace.get_current_span().get_span_context()
        trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else ""

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "trace_id": trace_id,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
