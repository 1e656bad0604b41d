"""Liveness and readiness endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ecuratif.core.config import get_settings
from ecuratif.db.session import engine
from ecuratif.utils.redis_client import create_redis_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "ecuratif-api"


@router.get("/live", summary="Liveness probe")
def live() -> dict[str, str]:
    """Indicates the API process is running."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/ready", summary="Readiness probe")
def ready() -> dict[str, Any]:
    """Check the database and the Redis broker used by background imports.

    The database is required; Redis only degrades background imports, so
    its failure is reported without failing readiness.
    """
    checks: dict[str, Any] = {"status": "ok", "service": SERVICE_NAME, "checks": {}}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        checks["checks"]["database"] = {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        checks["checks"]["database"] = {"status": "unhealthy", "message": str(e)}
        checks["status"] = "unhealthy"

    try:
        settings = get_settings()
        redis_client = create_redis_client(
            settings.celery_broker_url or settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
        )
        redis_client.ping()
        redis_client.close()
        checks["checks"]["redis"] = {"status": "healthy"}
    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        checks["checks"]["redis"] = {"status": "unhealthy", "message": str(e)}

    if checks["status"] != "ok":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=checks,
        )
    return checks
