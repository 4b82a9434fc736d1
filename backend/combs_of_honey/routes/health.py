"""
Combs of Honey — Health Check Route
====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs `SELECT 1` on the shared engine and reports trace export state.
Who:   Called by container health checks, load balancers, and monitoring.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from combs_of_honey import __version__
from combs_of_honey.config import settings
from combs_of_honey.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: set once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the service and its database. "
        "Answers 503 when the database cannot be reached."
    ),
)
async def health_check(response: Response) -> HealthResponse:
    """
    Check the health of the service and the database.

    Check details:
        Database: executes SELECT 1 to verify connection and query execution
        Tracing: reports whether spans are exported (OTLP endpoint configured)
    """
    db_status = "connected"
    overall = "healthy"

    try:
        from combs_of_honey.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        tracing="enabled" if settings.tracing_enabled else "disabled",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
