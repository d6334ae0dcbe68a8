"""Column factories shared by the table modules."""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum


def utcnow() -> datetime:
    return datetime.now(UTC)


def enum_column(enum_cls: type[Enum], *, index: bool = False) -> Column:
    """Store an enum by value in a plain VARCHAR (no native DB enum type)."""
    return Column(
        SAEnum(
            enum_cls,
            values_callable=lambda members: [m.value for m in members],
            native_enum=False,
            validate_strings=True,
            length=32,
        ),
        nullable=False,
        index=index,
    )


def timestamp_column(*, nullable: bool = True, on_update: bool = False) -> Column:
    return Column(
        DateTime(timezone=True),
        nullable=nullable,
        default=None if nullable else utcnow,
        onupdate=utcnow if on_update else None,
    )
