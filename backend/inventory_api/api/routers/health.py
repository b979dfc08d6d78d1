"""Simple health and readiness endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "inventory-api"


@router.get("", summary="Service status")
async def health(request: Request) -> dict[str, Any]:
    settings = request.app.state.settings
    return {
        "success": True,
        "message": "Server is running",
        "data": {
            "service": SERVICE_NAME,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }


@router.get("/live", summary="Liveness probe")
async def live() -> dict[str, str]:
    """Indicates API process is running."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/ready", summary="Readiness probe", response_model=None)
async def ready(request: Request) -> dict[str, Any] | JSONResponse:
    """Check the database and, when rate limiting is on, Redis.

    Responds 503 with the per-dependency detail if any check fails.
    """
    checks: dict[str, Any] = {
        "status": "ok",
        "service": SERVICE_NAME,
        "checks": {},
    }
    all_healthy = True

    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        checks["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful",
        }
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        checks["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
        }
        all_healthy = False

    redis_client = getattr(request.app.state, "redis", None)
    if redis_client is not None:
        try:
            redis_client.ping()
            checks["checks"]["redis"] = {
                "status": "healthy",
                "message": "Redis connection successful",
            }
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}", exc_info=True)
            checks["checks"]["redis"] = {
                "status": "unhealthy",
                "message": f"Redis connection failed: {str(e)}",
            }
            all_healthy = False

    if not all_healthy:
        checks["status"] = "unhealthy"
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=checks)

    return checks
