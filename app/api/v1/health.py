"""Health check endpoints."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from app.api.deps import DbSession

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthCheck(BaseModel):
    """Result of a single dependency check."""

    status: str
    response_time_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    response_time_ms: float
    checks: dict[str, HealthCheck]


async def check_database(session) -> HealthCheck:
    """Run ``SELECT 1`` and time it."""
    started = time.perf_counter()
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return HealthCheck(status="unhealthy", error=str(e))
    elapsed = round((time.perf_counter() - started) * 1000, 2)
    return HealthCheck(status="healthy", response_time_ms=elapsed)


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Returns service health including database connectivity",
    responses={503: {"model": HealthResponse}},
)
async def health_check(session: DbSession):
    """Check service health.

    Returns:
        200 when every check passes, 503 otherwise
    """
    started = time.perf_counter()
    checks = {"database": await check_database(session)}

    healthy = all(check.status == "healthy" for check in checks.values())
    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        response_time_ms=round((time.perf_counter() - started) * 1000, 2),
        checks=checks,
    )

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(exclude_none=True),
    )


@router.get(
    "/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
    description="Returns immediately without touching dependencies",
)
async def liveness_check() -> dict:
    return {"status": "ok"}
