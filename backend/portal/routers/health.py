"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime, timezone

import redis.asyncio as redis
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from portal.config import Settings, get_settings
from portal.database import engine
from portal.utils.cache import get_redis

router = APIRouter(tags=["health"])

SERVICE_NAME = "RT-RW Portal"


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Lightweight health check for load balancer (no DB/Redis check)."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(settings: Settings = Depends(get_settings)):
    """Readiness check: database and Redis must both answer.

    The spreadsheet is reported but does not fail readiness; reads from it
    already degrade to empty results.
    """
    checks = {
        "service": "ok",
        "database": "unknown",
        "redis": "unknown",
        "sheets": "configured" if settings.sheets_configured else "not configured",
    }
    overall_healthy = True

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = f"error: {e.__class__.__name__}"
        overall_healthy = False

    try:
        await get_redis(settings.redis_url).ping()
        checks["redis"] = "ok"
    except (redis.RedisError, OSError) as e:
        checks["redis"] = f"error: {e.__class__.__name__}"
        overall_healthy = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": SERVICE_NAME,
            "checks": checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
