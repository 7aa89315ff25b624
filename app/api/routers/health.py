"""
Health check endpoints for monitoring and orchestration (K8s, Docker, etc.)

Provides multiple health check endpoints:
- /health: Basic liveness check (always returns 200)
- /health/db: Database connectivity check
- /health/ready: Readiness check (database and payment circuit)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies import get_paystack_gateway
from app.api.deps import get_db_session
from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "travel-booking-api"


@router.get("/health")
async def health_check():
    """Basic liveness probe."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def health_check_db(session: AsyncSession = Depends(get_db_session)):
    """
    Database connectivity health check.

    Returns 503 Service Unavailable if database is down.
    """
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        return {"status": "healthy", "component": "database"}
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database health check failed", exc_info=e)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "component": "database",
                "error": "Database connection failed",
            },
        )


@router.get("/health/ready")
async def health_check_ready(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """
    Readiness probe.

    In in-memory mode the database is not on the request path, so only
    the SQL backend is probed. An open payment circuit is reported but
    does not make the service unready: reservations still work.
    """
    health_status = {"status": "ready", "checks": {}}

    if settings.use_in_memory:
        health_status["checks"]["database"] = "skipped"
    else:
        try:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "healthy"
        except (SQLAlchemyError, OSError) as e:
            logger.error("Readiness check: Database unhealthy", exc_info=e)
            health_status["status"] = "not_ready"
            health_status["checks"]["database"] = "unhealthy"
            return JSONResponse(status_code=503, content=health_status)

        health_status["checks"]["payment_circuit"] = get_paystack_gateway().circuit_state

    return health_status


@router.get("/health/live")
async def health_check_live():
    """Alias for /health for Kubernetes liveness probe."""
    return {"status": "ok", "service": SERVICE_NAME}
