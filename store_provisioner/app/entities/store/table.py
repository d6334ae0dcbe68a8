"""Store table: one row per managed store, soft-deleted."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, Index, String, Text, text
from sqlmodel import Field, SQLModel

from store_provisioner.app.core.models.enums import StoreEngine, StorePlan, StoreStatus
from store_provisioner.app.entities.columns import enum_column, timestamp_column, utcnow


class StoreRecord(SQLModel, table=True):
    __tablename__ = "stores"
    __table_args__ = (
        # Names are unique among stores that have not been deleted yet.
        Index(
            "uq_stores_name_active",
            "name",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("ix_stores_created_at", "created_at"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    name: str = Field(sa_column=Column(String(50), nullable=False))
    display_name: str | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    engine: StoreEngine = Field(sa_column=enum_column(StoreEngine, index=True))
    plan: StorePlan = Field(sa_column=enum_column(StorePlan))
    status: StoreStatus = Field(sa_column=enum_column(StoreStatus, index=True))
    status_message: str | None = Field(default=None, sa_column=Column(Text, nullable=True))

    namespace: str | None = Field(default=None, max_length=63)
    helm_release: str | None = Field(default=None, max_length=53)
    url: str | None = Field(default=None, max_length=255)
    admin_url: str | None = Field(default=None, max_length=255)
    admin_username: str | None = Field(default=None, max_length=64)
    admin_password_secret: str | None = Field(default=None, max_length=253)

    created_by: str | None = Field(default=None, max_length=120)
    created_at: datetime = Field(
        default_factory=utcnow, sa_column=timestamp_column(nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=timestamp_column(nullable=False, on_update=True)
    )
    deleted_at: datetime | None = Field(default=None, sa_column=timestamp_column())
