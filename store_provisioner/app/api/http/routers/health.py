"""Health check endpoints router.

Endpoint Summary:
    GET /health          - Liveness probe (app is running)
    GET /health/ready    - Readiness probe (database and driver usable)
    GET /health/database - Database-specific health check
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from store_provisioner.app.api.http.app_data import ApplicationDependencies
from store_provisioner.app.api.http.deps import get_app_dependencies, get_health_service
from store_provisioner.app.api.http.schemas.health import (
    DatabaseHealthDetailed,
    HealthCheckError,
    LivenessResponse,
    OverallStatus,
    ReadinessResponse,
    ServiceStatus,
)
from store_provisioner.app.core.services.health_service import HealthCheckService

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Basic health check - returns 200 if the application process is running.",
)
async def health() -> LivenessResponse:
    return LivenessResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Database and driver are ready"},
        503: {
            "description": "Database or driver is not ready",
            "model": ReadinessResponse,
        },
    },
    summary="Readiness probe",
    description="Checks database reachability and Helm availability independently.",
)
async def readiness(
    health_service: HealthCheckService = Depends(get_health_service),
) -> ReadinessResponse | JSONResponse:
    """Returns 200 if both checks pass, 503 if either fails."""
    result = await health_service.check_all()

    if result.status == OverallStatus.NOT_READY:
        return JSONResponse(
            status_code=503,
            content=result.model_dump(mode="json"),
        )

    return result


@router.get(
    "/database",
    response_model=DatabaseHealthDetailed,
    responses={
        503: {
            "description": "Database is unhealthy",
            "model": HealthCheckError,
        },
    },
    summary="Database health check",
    description="Database-specific health check with connection pool status.",
)
async def health_database(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
    health_service: HealthCheckService = Depends(get_health_service),
) -> DatabaseHealthDetailed | JSONResponse:
    try:
        result = await health_service.check_database()
        pool_status = app_deps.database_service.get_pool_status()
        pool: dict[str, int | str] | None = dict(pool_status) if pool_status else None
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content=HealthCheckError(
                status=ServiceStatus.UNHEALTHY,
                error=str(e),
                error_type=type(e).__name__,
            ).model_dump(mode="json"),
        )

    detailed = DatabaseHealthDetailed(**result.model_dump(), pool=pool)
    if result.status == ServiceStatus.UNHEALTHY:
        return JSONResponse(status_code=503, content=detailed.model_dump(mode="json"))
    return detailed
