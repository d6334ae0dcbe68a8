"""Pydantic schemas for the store API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from store_provisioner.app.core.models.enums import (
    EventType,
    JobStatus,
    JobType,
    StoreEngine,
    StorePlan,
    StoreStatus,
)
from store_provisioner.app.entities.event.table import EventRecord
from store_provisioner.app.entities.job.table import JobRecord
from store_provisioner.app.entities.store.table import StoreRecord

# =============================================================================
# Response Models
# =============================================================================


class StoreUrls(BaseModel):
    storefront: str
    admin: str | None = None


class StoreResponse(BaseModel):
    """Public view of a store. Credential values are never exposed."""

    id: str
    name: str
    display_name: str | None = None
    description: str | None = None
    engine: StoreEngine
    plan: StorePlan
    status: StoreStatus
    status_message: str | None = None
    urls: StoreUrls | None = Field(
        default=None, description="Present once the store is running"
    )
    admin_username: str | None = None
    admin_password_secret: str | None = Field(
        default=None, description="Name of the Secret holding the admin password"
    )
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, store: StoreRecord) -> StoreResponse:
        return cls(
            id=store.id,
            name=store.name,
            display_name=store.display_name,
            description=store.description,
            engine=store.engine,
            plan=store.plan,
            status=store.status,
            status_message=store.status_message,
            urls=StoreUrls(storefront=store.url, admin=store.admin_url) if store.url else None,
            admin_username=store.admin_username,
            admin_password_secret=store.admin_password_secret,
            created_at=store.created_at,
            updated_at=store.updated_at,
        )


class JobResponse(BaseModel):
    id: str
    job_type: JobType
    status: JobStatus
    progress: int
    current_step: str | None = None
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_record(cls, job: JobRecord) -> JobResponse:
        return cls.model_validate(job, from_attributes=True)


class StoreDetailResponse(StoreResponse):
    latest_job: JobResponse | None = None


class StoreCreatedResponse(BaseModel):
    store: StoreResponse
    message: str = "Store creation started"


class StoreDeletedResponse(BaseModel):
    message: str = "Store deletion started"


class StoreListResponse(BaseModel):
    stores: list[StoreResponse]
    total: int
    page: int
    limit: int


class EventResponse(BaseModel):
    id: int
    event_type: EventType
    message: str
    created_at: datetime

    @classmethod
    def from_record(cls, event: EventRecord) -> EventResponse:
        return cls.model_validate(event, from_attributes=True)


class EventListResponse(BaseModel):
    events: list[EventResponse]


# =============================================================================
# Error Models
# =============================================================================


class ErrorDetail(BaseModel):
    code: str = Field(description="Machine-readable error code")
    message: str
    details: list[Any] | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx store API response."""

    error: ErrorDetail
