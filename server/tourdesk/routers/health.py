"""Liveness and readiness endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import utcnow
from ..core.dependencies import DatabaseSession
from ..core.observability import SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
@router.post("/v1/health/ping", response_model=HealthResponse)
async def health_check() -> JSONResponse:
    """
    Health check endpoint.

    Returns current service status and timestamp. Also served as
    `POST /v1/health/ping` for clients that check liveness with a POST.
    """
    response_data = HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=utcnow(),
        version=SERVICE_VERSION,
        environment=settings.environment,
    )

    logger.debug(
        "Health check requested",
        extra={
            "status": response_data.status,
            "timestamp": response_data.timestamp.isoformat()
        }
    )

    return JSONResponse(
        status_code=200,
        content=response_data.model_dump(mode="json")
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(db: AsyncSession = DatabaseSession) -> JSONResponse:
    """503 until the database answers a trivial query."""
    checks = {"database": "ok"}
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Readiness check failed", extra={"check": "database", "error": str(e)})
        checks["database"] = "error"

    ready = all(value == "ok" for value in checks.values())
    response_data = ReadinessResponse(
        status=HealthStatus.READY if ready else HealthStatus.UNAVAILABLE,
        checks=checks,
    )
    return JSONResponse(status_code=200 if ready else 503, content=response_data.model_dump(mode="json"))
