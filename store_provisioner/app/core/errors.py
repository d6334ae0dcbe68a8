"""Error taxonomy for store lifecycle operations.

Conflict, NotFound, UnsupportedEngine and Unavailable errors are raised
synchronously to callers of the orchestrator entry points. Validation errors
come from the request models before the orchestrator is reached. DriverFailure,
Timeout and Internal errors happen inside detached tasks and are recorded
on the Store/Job/Event rows instead of being raised to anyone.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable error category, also used as the API error code."""

    VALIDATION = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    UNSUPPORTED_ENGINE = "UNSUPPORTED_ENGINE"
    DRIVER_FAILURE = "DRIVER_FAILURE"
    TIMEOUT = "TIMEOUT"
    UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL = "INTERNAL_ERROR"


class StoreProvisionerError(Exception):
    """Base class for all lifecycle errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConflictError(StoreProvisionerError):
    """Duplicate store name, or an operation already in progress."""

    kind = ErrorKind.CONFLICT


class StoreNotFoundError(StoreProvisionerError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, store_id: str) -> None:
        super().__init__("Store not found")
        self.store_id = store_id


class UnsupportedEngineError(StoreProvisionerError):
    """The engine is known but has no provisioning implementation yet."""

    kind = ErrorKind.UNSUPPORTED_ENGINE


class DriverFailureError(StoreProvisionerError):
    """The infrastructure tool reported an error."""

    kind = ErrorKind.DRIVER_FAILURE


class ReadinessTimeoutError(StoreProvisionerError):
    """The workload did not become ready within the attempt budget."""

    kind = ErrorKind.TIMEOUT


class ShuttingDownError(StoreProvisionerError):
    """New lifecycle work is refused while background tasks are drained."""

    kind = ErrorKind.UNAVAILABLE


class InvalidTransitionError(StoreProvisionerError):
    """A status write did not match the lifecycle state machine."""

    kind = ErrorKind.INTERNAL
