"""
Combs of Honey — Tracing Middleware
====================================

What:  One OpenTelemetry SERVER span per HTTP request.
How:   Continues the caller's trace from W3C `traceparent` headers, names the
       span after the matched route template ("GET /combs/{comb_id}"), and
       records HTTP and domain attributes once the route has run.
Who:   Applied to every request via Starlette middleware. Route handlers stay
       free of tracing code; services add `db-call` child spans.

Span attributes:
    http.method, http.target, http.route, http.status_code
    comb.id      ← {comb_id} path parameter
    honey.type   ← {honey_type} path parameter
"""

from opentelemetry import trace
from opentelemetry.propagate import extract
from opentelemetry.trace import SpanKind, Status, StatusCode
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from combs_of_honey.telemetry import TRACER_NAME

# path parameter → span attribute
PATH_PARAM_ATTRIBUTES = {
    "comb_id": "comb.id",
    "honey_type": "honey.type",
}


class TracingMiddleware(BaseHTTPMiddleware):
    """
    Wraps each request in a server span.

    When an outer ASGI instrumentation has already opened a SERVER span for
    this request, that span is annotated instead of starting a second one,
    so a request always yields exactly one server span.

    The router fills `scope["route"]` and `scope["path_params"]` on the
    shared scope dict, so both are read after `call_next` returns.
    Responses with status >= 500 mark the span ERROR; exceptions escaping
    the app are recorded on the span by the tracer.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        current = trace.get_current_span()
        if current.is_recording() and getattr(current, "kind", None) == SpanKind.SERVER:
            response = await call_next(request)
            self._annotate(current, request, response)
            return response

        tracer = trace.get_tracer(TRACER_NAME)
        parent = extract(request.headers)

        with tracer.start_as_current_span(
            f"{request.method} {request.url.path}",
            context=parent,
            kind=SpanKind.SERVER,
        ) as span:
            response = await call_next(request)
            self._annotate(span, request, response)
            return response

    @staticmethod
    def _annotate(span: trace.Span, request: Request, response: Response) -> None:
        span.set_attribute("http.method", request.method)
        span.set_attribute("http.target", request.url.path)

        route = request.scope.get("route")
        route_path = getattr(route, "path", None)
        if route_path:
            span.update_name(f"{request.method} {route_path}")
            span.set_attribute("http.route", route_path)

        path_params = request.scope.get("path_params") or {}
        for param, attribute in PATH_PARAM_ATTRIBUTES.items():
            if param in path_params:
                span.set_attribute(attribute, str(path_params[param]))

        span.set_attribute("http.status_code", response.status_code)
        if response.status_code >= 500:
            span.set_status(Status(StatusCode.ERROR))
