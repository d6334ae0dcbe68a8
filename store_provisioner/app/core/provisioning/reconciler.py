"""Startup reconciliation of lifecycle jobs left behind by a previous process."""

from __future__ import annotations

from datetime import datetime, timedelta

from loguru import logger

from store_provisioner.app.core.errors import InvalidTransitionError
from store_provisioner.app.core.models.enums import (
    ACTIVE_JOB_STATUSES,
    EventType,
    JobStatus,
    StoreStatus,
)
from store_provisioner.app.core.services.lifecycle_store import LifecycleStore
from store_provisioner.app.entities.columns import utcnow


def reconcile_stale_jobs(
    repository: LifecycleStore,
    threshold_seconds: float,
    *,
    now: datetime | None = None,
) -> int:
    """Fail jobs stuck in pending/running and the stores they were driving.

    A job counts as stale when it has not been updated for longer than
    `threshold_seconds`. Its store moves to `failed` where the state
    machine allows it, and a `*_failed` event is appended.

    Returns:
        Number of jobs failed
    """
    cutoff = (now or utcnow()) - timedelta(seconds=threshold_seconds)
    stale_jobs = repository.find_stale_jobs(cutoff)
    if not stale_jobs:
        logger.debug("No stale lifecycle jobs found")
        return 0

    failed = 0
    for job in stale_jobs:
        message = (
            f"{job.job_type.value.capitalize()} interrupted: job made no progress "
            f"for more than {int(threshold_seconds)}s"
        )
        updated = repository.update_job(
            job.store_id,
            job.job_type,
            from_statuses=ACTIVE_JOB_STATUSES,
            status=JobStatus.FAILED,
            error=message,
            completed_at=utcnow(),
        )
        if updated == 0:
            continue
        failed += 1

        store = repository.get_store(job.store_id)
        if store is not None and store.status.can_transition_to(StoreStatus.FAILED):
            try:
                repository.transition_store(
                    job.store_id, StoreStatus.FAILED, status_message=message
                )
            except InvalidTransitionError as e:
                logger.warning(f"Store {job.store_id} not marked failed: {e.message}")

        repository.append_event(job.store_id, EventType.failed_for(job.job_type), message)
        logger.warning(f"Reconciled stale {job.job_type.value} job {job.id}: {message}")

    logger.info(f"Reconciliation failed {failed} stale job(s)")
    return failed
