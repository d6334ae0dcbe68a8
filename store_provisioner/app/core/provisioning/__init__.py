from store_provisioner.app.core.provisioning.orchestrator import StoreDetail, StoreOrchestrator
from store_provisioner.app.core.provisioning.reconciler import reconcile_stale_jobs
from store_provisioner.app.core.provisioning.supervisor import (
    SupervisorClosedError,
    TaskOutcome,
    TaskSupervisor,
)

__all__ = [
    "StoreDetail",
    "StoreOrchestrator",
    "SupervisorClosedError",
    "TaskOutcome",
    "TaskSupervisor",
    "reconcile_stale_jobs",
]
