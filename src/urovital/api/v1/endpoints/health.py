"""
Health Check Endpoints.

Provides health and readiness endpoints for orchestration systems.
"""
import time
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text

from ....core.config import Settings, get_settings
from ....core.permissions import PERMISSION_TABLE
from ....core.responses import HealthCheck, HealthResponse
from ....db.session import DbSession
from ....models.enums import UserRole

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the service and its dependencies.",
)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
    db: DbSession,
) -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Checks:
    - Database connectivity
    - Permission table covers every role
    """
    checks: dict[str, HealthCheck] = {}

    db_start = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
        db_latency = (time.perf_counter() - db_start) * 1000
        checks["database"] = HealthCheck(
            status="healthy",
            latency_ms=round(db_latency, 2),
            message="Connected",
        )
    except Exception as e:
        checks["database"] = HealthCheck(
            status="unhealthy",
            message=str(e),
        )

    missing_roles = [role.value for role in UserRole if role not in PERMISSION_TABLE]
    if missing_roles:
        checks["permissions"] = HealthCheck(
            status="degraded",
            message=f"No permission entry for: {', '.join(missing_roles)}",
        )
    else:
        checks["permissions"] = HealthCheck(
            status="healthy",
            message=f"{len(PERMISSION_TABLE)} roles loaded",
        )

    overall_status = "healthy"
    if any(c.status == "unhealthy" for c in checks.values()):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in checks.values()):
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.APP_ENV,
        checks=checks,
    )


@router.get(
    "/ready",
    summary="Readiness probe",
    description="Returns 200 if the service is ready to accept traffic.",
)
async def readiness_probe(db: DbSession) -> dict[str, str]:
    """Kubernetes readiness probe. Fails while the database is unreachable."""
    await db.execute(text("SELECT 1"))
    return {"status": "ready"}


@router.get(
    "/live",
    summary="Liveness probe",
    description="Returns 200 if the service is alive.",
)
async def liveness_probe() -> dict[str, str]:
    return {"status": "alive"}
