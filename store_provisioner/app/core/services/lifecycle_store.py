"""Persistence of Store, Job and Event records.

All status writes are conditional updates: a store only moves to a status
from one of its allowed source statuses, and a job only moves out of the
statuses the caller expects. Two overlapping writers can therefore never
both complete the same job or both apply the same transition.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from store_provisioner.app.core.errors import ConflictError, InvalidTransitionError
from store_provisioner.app.core.models.enums import (
    ACTIVE_JOB_STATUSES,
    EventType,
    JobStatus,
    JobType,
    StoreEngine,
    StoreStatus,
)
from store_provisioner.app.core.services.database.db_session import DbSessionService
from store_provisioner.app.entities.event.table import EventRecord
from store_provisioner.app.entities.job.table import JobRecord
from store_provisioner.app.entities.store.table import StoreRecord


@dataclass
class StorePage:
    """One page of non-deleted stores, newest first."""

    stores: list[StoreRecord]
    total: int
    page: int
    limit: int


class LifecycleStore:
    """Repository for lifecycle records backed by a `DbSessionService`."""

    def __init__(self, db: DbSessionService) -> None:
        self._db = db

    def health_check(self) -> bool:
        return self._db.health_check()

    # =========================================================================
    # Stores
    # =========================================================================

    def create_store_with_job(
        self, store: StoreRecord, job_type: JobType
    ) -> tuple[StoreRecord, JobRecord]:
        """Insert a store and its first pending job in one transaction.

        Raises:
            ConflictError: If another non-deleted store already holds the name
        """
        job = JobRecord(
            store_id=store.id, job_type=job_type, status=JobStatus.PENDING, progress=0
        )
        try:
            with self._db.session() as session:
                session.add(store)
                session.flush()
                session.add(job)
        except IntegrityError as e:
            logger.debug(f"Store insert rejected by unique index: {e}")
            raise ConflictError(f"Store with name '{store.name}' already exists") from e
        return store, job

    def get_store(self, store_id: str) -> StoreRecord | None:
        with self._db.session() as session:
            return session.get(StoreRecord, store_id)

    def find_active_store_by_name(self, name: str) -> StoreRecord | None:
        with self._db.session() as session:
            statement = select(StoreRecord).where(
                StoreRecord.name == name, col(StoreRecord.deleted_at).is_(None)
            )
            return session.exec(statement).first()

    def transition_store(
        self, store_id: str, target: StoreStatus, **fields: Any
    ) -> StoreRecord:
        """Move a store to `target` and update `fields` in the same write.

        Raises:
            InvalidTransitionError: If the store's current status does not
                allow entering `target` (or the store does not exist)
        """
        sources = StoreStatus.sources_for(target)
        statement = (
            update(StoreRecord)
            .where(
                col(StoreRecord.id) == store_id,
                col(StoreRecord.status).in_(list(sources)),
            )
            .values(status=target, **fields)
        )
        with self._db.session() as session:
            result = session.connection().execute(statement)
            store = session.get(StoreRecord, store_id)

        if result.rowcount == 0:
            current = store.status.value if store else "missing"
            raise InvalidTransitionError(
                f"Store {store_id} cannot move from {current} to {target.value}"
            )
        assert store is not None
        return store

    def list_stores(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        status: StoreStatus | None = None,
        engine: StoreEngine | None = None,
    ) -> StorePage:
        """List non-deleted stores, newest first."""
        conditions: list[Any] = [col(StoreRecord.deleted_at).is_(None)]
        if status is not None:
            conditions.append(col(StoreRecord.status) == status)
        if engine is not None:
            conditions.append(col(StoreRecord.engine) == engine)

        with self._db.session() as session:
            stores = session.exec(
                select(StoreRecord)
                .where(*conditions)
                .order_by(col(StoreRecord.created_at).desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).all()
            total = session.exec(
                select(func.count()).select_from(StoreRecord).where(*conditions)
            ).one()

        return StorePage(stores=list(stores), total=total, page=page, limit=limit)

    # =========================================================================
    # Jobs
    # =========================================================================

    def create_job(
        self,
        store_id: str,
        job_type: JobType,
        status: JobStatus,
        *,
        started_at: datetime | None = None,
    ) -> JobRecord:
        job = JobRecord(
            store_id=store_id,
            job_type=job_type,
            status=status,
            progress=0,
            started_at=started_at,
        )
        with self._db.session() as session:
            session.add(job)
        return job

    def update_job(
        self,
        store_id: str,
        job_type: JobType,
        *,
        from_statuses: Iterable[JobStatus],
        **fields: Any,
    ) -> int:
        """Update the store's jobs of `job_type` currently in `from_statuses`.

        Returns:
            Number of rows updated; 0 means another writer got there first
        """
        statement = (
            update(JobRecord)
            .where(
                col(JobRecord.store_id) == store_id,
                col(JobRecord.job_type) == job_type,
                col(JobRecord.status).in_(list(from_statuses)),
            )
            .values(**fields)
        )
        with self._db.session() as session:
            result = session.connection().execute(statement)
        return result.rowcount

    def get_latest_job(self, store_id: str) -> JobRecord | None:
        with self._db.session() as session:
            return session.exec(
                select(JobRecord)
                .where(JobRecord.store_id == store_id)
                .order_by(col(JobRecord.created_at).desc())
            ).first()

    def list_jobs(self, store_id: str) -> list[JobRecord]:
        with self._db.session() as session:
            return list(
                session.exec(
                    select(JobRecord)
                    .where(JobRecord.store_id == store_id)
                    .order_by(col(JobRecord.created_at))
                ).all()
            )

    def find_stale_jobs(self, older_than: datetime) -> list[JobRecord]:
        """Pending or running jobs not updated since `older_than`."""
        with self._db.session() as session:
            return list(
                session.exec(
                    select(JobRecord).where(
                        col(JobRecord.status).in_(list(ACTIVE_JOB_STATUSES)),
                        col(JobRecord.updated_at) < older_than,
                    )
                ).all()
            )

    # =========================================================================
    # Events
    # =========================================================================

    def append_event(
        self, store_id: str, event_type: EventType, message: str
    ) -> EventRecord:
        event = EventRecord(store_id=store_id, event_type=event_type, message=message)
        with self._db.session() as session:
            session.add(event)
        return event

    def list_events(self, store_id: str) -> list[EventRecord]:
        with self._db.session() as session:
            return list(
                session.exec(
                    select(EventRecord)
                    .where(EventRecord.store_id == store_id)
                    .order_by(col(EventRecord.id))
                ).all()
            )
