from store_provisioner.app.core.services.database import DbManageService, DbSessionService
from store_provisioner.app.core.services.lifecycle_store import LifecycleStore, StorePage

__all__ = [
    "DbManageService",
    "DbSessionService",
    "LifecycleStore",
    "StorePage",
]
