"""Health check response schemas.

Status Terminology:
    - healthy: Service is fully operational
    - unhealthy: Service is not operational (critical failure)
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ServiceStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class OverallStatus(str, Enum):
    """Overall application readiness status.

    - READY: Database and infrastructure driver are both usable
    - NOT_READY: At least one of them is not
    """

    READY = "ready"
    NOT_READY = "not_ready"


class ServiceHealthBase(BaseModel):
    """Base model for individual service health check results."""

    model_config = ConfigDict(use_enum_values=True)

    status: ServiceStatus = Field(description="Current health status of the service")
    error: str | None = Field(
        default=None,
        description="Error message if status is unhealthy",
    )


class DatabaseHealth(ServiceHealthBase):
    type: Annotated[
        str,
        Field(description="Database type (postgresql, sqlite)"),
    ]


class DatabaseHealthDetailed(DatabaseHealth):
    pool: dict[str, int | str] | None = Field(
        default=None,
        description="Connection pool statistics",
    )


class DriverHealth(ServiceHealthBase):
    """Health check result for the infrastructure driver (Helm)."""

    binary: str = Field(description="Helm executable used by the driver")


class AllServicesHealth(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    database: DatabaseHealth
    driver: DriverHealth


class ReadinessResponse(BaseModel):
    """Response model for the /health/ready endpoint."""

    model_config = ConfigDict(use_enum_values=True)

    status: OverallStatus = Field(description="Overall application readiness status")
    environment: str = Field(
        description="Current deployment environment (development, production, etc.)"
    )
    checks: AllServicesHealth = Field(
        description="Individual service health check results"
    )


class LivenessResponse(BaseModel):
    """Response model for the /health endpoint (liveness probe)."""

    status: Annotated[
        str,
        Field(description="Always 'healthy' if the app is running"),
    ] = "healthy"
    service: Annotated[
        str,
        Field(description="Service identifier"),
    ] = "store-provisioner"


class HealthCheckError(BaseModel):
    status: ServiceStatus = ServiceStatus.UNHEALTHY
    error: str = Field(description="Error message")
    error_type: str = Field(description="Exception class name")
