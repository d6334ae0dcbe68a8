"""API schema definitions for HTTP endpoints.

Modules:
    health: Health check response models
    stores: Store lifecycle request/response models
"""

from store_provisioner.app.api.http.schemas.health import (
    AllServicesHealth,
    DatabaseHealth,
    DatabaseHealthDetailed,
    DriverHealth,
    HealthCheckError,
    LivenessResponse,
    OverallStatus,
    ReadinessResponse,
    ServiceHealthBase,
    ServiceStatus,
)
from store_provisioner.app.api.http.schemas.stores import (
    ErrorDetail,
    ErrorResponse,
    EventListResponse,
    EventResponse,
    JobResponse,
    StoreCreatedResponse,
    StoreDeletedResponse,
    StoreDetailResponse,
    StoreListResponse,
    StoreResponse,
    StoreUrls,
)

__all__ = [
    # Health schemas
    "ServiceStatus",
    "OverallStatus",
    "ServiceHealthBase",
    "DatabaseHealth",
    "DatabaseHealthDetailed",
    "DriverHealth",
    "AllServicesHealth",
    "ReadinessResponse",
    "LivenessResponse",
    "HealthCheckError",
    # Store schemas
    "StoreUrls",
    "StoreResponse",
    "StoreDetailResponse",
    "StoreCreatedResponse",
    "StoreDeletedResponse",
    "StoreListResponse",
    "JobResponse",
    "EventResponse",
    "EventListResponse",
    "ErrorDetail",
    "ErrorResponse",
]
