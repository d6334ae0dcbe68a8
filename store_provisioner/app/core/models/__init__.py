"""Domain enums and request models."""

from .enums import (
    ACTIVE_JOB_STATUSES,
    ALLOWED_TRANSITIONS,
    DELETE_REJECTED_STATUSES,
    EventType,
    JobStatus,
    JobType,
    StoreEngine,
    StorePlan,
    StoreStatus,
)
from .requests import STORE_NAME_PATTERN, StoreCreateRequest

__all__ = [
    "ACTIVE_JOB_STATUSES",
    "ALLOWED_TRANSITIONS",
    "DELETE_REJECTED_STATUSES",
    "EventType",
    "JobStatus",
    "JobType",
    "STORE_NAME_PATTERN",
    "StoreCreateRequest",
    "StoreEngine",
    "StorePlan",
    "StoreStatus",
]
