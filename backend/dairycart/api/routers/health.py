"""Liveness and readiness endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from dairycart.core.config import get_settings
from dairycart.db.session import engine
from dairycart.utils.redis_client import create_redis_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "dairycart-api"


def _check_database() -> dict[str, str]:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1")).fetchone()
    return {"status": "healthy", "message": "Database connection successful"}


def _check_redis(url: str, label: str) -> dict[str, str]:
    client = create_redis_client(url, decode_responses=True, socket_connect_timeout=2)
    try:
        client.ping()
    finally:
        client.close()
    return {"status": "healthy", "message": f"{label} connection successful"}


@router.get("/live", summary="Liveness probe")
async def live() -> dict[str, str]:
    """Indicates the API process is running."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/ready", summary="Readiness probe")
async def ready() -> dict[str, Any]:
    """Check the database and the webhook broker.

    The database is required. An unreachable broker is reported but does not
    fail readiness.
    """
    settings = get_settings()
    checks: dict[str, Any] = {
        "status": "ok",
        "service": SERVICE_NAME,
        "checks": {},
    }

    try:
        checks["checks"]["database"] = _check_database()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        checks["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
        }
        checks["status"] = "unhealthy"

    broker_url = settings.celery_broker_url or settings.redis_url
    try:
        checks["checks"]["celery_broker"] = _check_redis(broker_url, "Celery broker")
    except RedisError as e:
        logger.warning(f"Celery broker health check failed: {e}")
        checks["checks"]["celery_broker"] = {
            "status": "unhealthy",
            "message": f"Celery broker connection failed: {str(e)}",
        }

    if checks["status"] != "ok":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        )

    return checks
