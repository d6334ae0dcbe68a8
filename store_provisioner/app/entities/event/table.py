"""Event table: append-only audit trail per store."""

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, String, Text
from sqlmodel import Field, SQLModel

from store_provisioner.app.core.models.enums import EventType
from store_provisioner.app.entities.columns import enum_column, timestamp_column, utcnow


class EventRecord(SQLModel, table=True):
    __tablename__ = "store_events"
    __table_args__ = (Index("ix_store_events_store_created", "store_id", "created_at"),)

    id: int | None = Field(default=None, primary_key=True)
    store_id: str = Field(
        sa_column=Column(
            String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False
        )
    )
    event_type: EventType = Field(sa_column=enum_column(EventType))
    message: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow, sa_column=timestamp_column(nullable=False)
    )
