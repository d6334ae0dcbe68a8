"""Lifecycle enumerations and the store state machine."""

from __future__ import annotations

from enum import Enum


class StoreStatus(str, Enum):
    """Store lifecycle status.

    Happy paths are `pending -> provisioning -> running` and
    `running -> deleting -> deleted`. `failed` can be reached from either
    path and is left only through an explicit delete.
    """

    PENDING = "pending"
    PROVISIONING = "provisioning"
    RUNNING = "running"
    FAILED = "failed"
    DELETING = "deleting"
    DELETED = "deleted"

    def can_transition_to(self, target: StoreStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self]

    @classmethod
    def sources_for(cls, target: StoreStatus) -> frozenset[StoreStatus]:
        """All statuses from which `target` may be entered."""
        return frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if target in targets)


ALLOWED_TRANSITIONS: dict[StoreStatus, frozenset[StoreStatus]] = {
    StoreStatus.PENDING: frozenset(
        {StoreStatus.PROVISIONING, StoreStatus.FAILED, StoreStatus.DELETING}
    ),
    StoreStatus.PROVISIONING: frozenset({StoreStatus.RUNNING, StoreStatus.FAILED}),
    StoreStatus.RUNNING: frozenset({StoreStatus.DELETING}),
    StoreStatus.FAILED: frozenset({StoreStatus.DELETING}),
    StoreStatus.DELETING: frozenset({StoreStatus.DELETED, StoreStatus.FAILED}),
    StoreStatus.DELETED: frozenset(),
}

# Statuses in which a delete request is refused outright.
DELETE_REJECTED_STATUSES = frozenset(
    {StoreStatus.PROVISIONING, StoreStatus.DELETING, StoreStatus.DELETED}
)


class StoreEngine(str, Enum):
    WOOCOMMERCE = "woocommerce"
    MEDUSA = "medusa"


class StorePlan(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


class JobType(str, Enum):
    PROVISION = "provision"
    DELETE = "delete"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_JOB_STATUSES = frozenset({JobStatus.PENDING, JobStatus.RUNNING})


class EventType(str, Enum):
    PROVISIONING_STARTED = "provisioning_started"
    PROVISIONING_COMPLETED = "provisioning_completed"
    PROVISIONING_FAILED = "provisioning_failed"
    DELETION_STARTED = "deletion_started"
    DELETION_COMPLETED = "deletion_completed"
    DELETION_FAILED = "deletion_failed"

    @classmethod
    def failed_for(cls, job_type: JobType) -> EventType:
        if job_type is JobType.PROVISION:
            return cls.PROVISIONING_FAILED
        return cls.DELETION_FAILED
