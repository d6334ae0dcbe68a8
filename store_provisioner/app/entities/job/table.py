"""Job table: one row per provision/delete attempt."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Index, String, Text
from sqlmodel import Field, SQLModel

from store_provisioner.app.core.models.enums import JobStatus, JobType
from store_provisioner.app.entities.columns import enum_column, timestamp_column, utcnow


class JobRecord(SQLModel, table=True):
    __tablename__ = "store_jobs"
    __table_args__ = (
        Index("ix_store_jobs_store_type_status", "store_id", "job_type", "status"),
        Index("ix_store_jobs_status_updated", "status", "updated_at"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    store_id: str = Field(
        sa_column=Column(
            String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False
        )
    )
    job_type: JobType = Field(sa_column=enum_column(JobType))
    status: JobStatus = Field(sa_column=enum_column(JobStatus))
    progress: int = Field(default=0, ge=0, le=100)
    current_step: str | None = Field(default=None, max_length=255)
    error: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    started_at: datetime | None = Field(default=None, sa_column=timestamp_column())
    completed_at: datetime | None = Field(default=None, sa_column=timestamp_column())
    created_at: datetime = Field(
        default_factory=utcnow, sa_column=timestamp_column(nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=timestamp_column(nullable=False, on_update=True)
    )
