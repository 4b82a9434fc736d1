"""
Combs of Honey — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn combs_of_honey.main:app) or the
       `combs-of-honey` console script.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌─────────┐ ┌────────┐ ┌─────────┐ ┌──────┐ ┌──────┐    │
    │  │ Tracing │→│ Req ID │→│ Logging │→│ GZip │→│ CORS │    │
    │  └─────────┘ └────────┘ └─────────┘ └──────┘ └──────┘    │
    │                                                          │
    │  Routes:                                                 │
    │  ┌────────────┐ ┌─────────────────────────┐ ┌─────────┐  │
    │  │ /combs     │ │ /combs/{comb_id}/honey  │ │ /health │  │
    │  └────────────┘ └─────────────────────────┘ └─────────┘  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ DB→500 │ other→500 │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Initialize tracing (OTLP exporter when configured)
    3. Create the combs / honey tables if absent
    4. Log startup complete

    Shutdown:
    1. Dispose database engine (close all connections)
    2. Flush and shut down the tracer provider
    3. Log shutdown complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from combs_of_honey import __version__
from combs_of_honey.config import settings
from combs_of_honey.database import dispose_engine, init_models
from combs_of_honey.exceptions import (
    CombsOfHoneyError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from combs_of_honey.middleware.logging import RequestLoggingMiddleware
from combs_of_honey.middleware.request_id import RequestIDMiddleware, request_id_var
from combs_of_honey.middleware.tracing import TracingMiddleware
from combs_of_honey.routes import combs, health, honey
from combs_of_honey.telemetry import init_telemetry, shutdown_telemetry

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup, before any other initialization.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,  # Override any existing logging config
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    Code before yield runs on startup, code after yield on shutdown.
    The database engine is process-wide; handlers only borrow sessions.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Combs of Honey %s starting up...", __version__)

    init_telemetry(settings.otel_service_name, settings.otel_exporter_otlp_endpoint)

    await init_models()
    logger.info("Database ready: %s", settings.database_url.split("://", 1)[0])
    logger.info(
        "Visit counting: %s, embedded honey: %s",
        "atomic" if settings.atomic_visits else "read-modify-write",
        "on" if settings.embed_honey else "off",
    )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Combs of Honey shutting down...")

    await dispose_engine()
    shutdown_telemetry()

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError           → 400 Bad Request
        RequestValidationError    → 400 Bad Request (bad JSON body, non-integer comb_id)
        NotFoundError             → 404 Not Found
        DatabaseError             → 500 Internal Server Error
        CombsOfHoneyError (base)  → 500 Internal Server Error
        Exception (fallback)      → 500 Internal Server Error

    500 responses never carry internal details (SQL, driver messages);
    those are logged server-side with the request ID.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """FastAPI could not bind the path parameters or the JSON body."""
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation error on %s", rid, request.url.path)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "The request path or body is malformed.",
                "details": {"errors": jsonable_encoder(exc.errors())},
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(CombsOfHoneyError)
    async def handle_app_error(request: Request, exc: CombsOfHoneyError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; the stack trace is logged, never returned."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Combs of Honey API",
        description=(
            "Combs and the honey stored in them. Reading a honey record "
            "counts a visit on it."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # added CORS → GZip → Logging → RequestID → Tracing,
    # executed Tracing → RequestID → Logging → GZip → CORS.

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(TracingMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(combs.router)
    app.include_router(honey.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `combs_of_honey.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve the app on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "combs_of_honey.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
