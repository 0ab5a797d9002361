"""
Kavin's Catalog Backend — Health Check Route
==============================================

What:  Health endpoint for container probes and monitoring.
How:   Runs cheap checks against each dependency.

Status levels:
    healthy    database reachable, Gemini available, platform configured
    degraded   database reachable, Gemini or the platform is not
    unhealthy  database unreachable (the catalog serves demo data only)
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.gemini_service import gemini_service
from app.services.supabase_gateway import supabase_gateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


def _degrade(overall: str) -> str:
    return "degraded" if overall != "unhealthy" else overall


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Health of the API and its database, Gemini and auth/storage platform.",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    gemini_status = "available"
    platform_status = "configured"
    overall = "healthy"

    # SELECT 1 verifies both the pool and query execution
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    try:
        if gemini_service.circuit_breaker.state == "open":
            gemini_status = "circuit_open"
            overall = _degrade(overall)
        elif not await gemini_service.health_check():
            gemini_status = "unavailable"
            overall = _degrade(overall)
    except Exception as e:
        gemini_status = "unavailable"
        overall = _degrade(overall)
        logger.warning("Health check: Gemini unreachable: %s", str(e))

    if not await supabase_gateway.health_check():
        platform_status = "not_configured"
        overall = _degrade(overall)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        platform=platform_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
