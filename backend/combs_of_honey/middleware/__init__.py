# Middleware package init
"""
Combs of Honey — Middleware Package
====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Tracing] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Tracing: server span per request, continues incoming W3C trace context
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: method, path, status and duration with the request ID
    4. GZip / CORS: FastAPI's stock middleware
"""
