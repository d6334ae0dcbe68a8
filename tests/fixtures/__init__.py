"""Shared pytest fixtures: SQLite database, lifecycle services and fakes."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from store_provisioner.app.core.models.enums import (
    JobType,
    StoreEngine,
    StorePlan,
    StoreStatus,
)
from store_provisioner.app.core.provisioning import StoreOrchestrator, TaskSupervisor
from store_provisioner.app.core.services import (
    DbManageService,
    DbSessionService,
    LifecycleStore,
)
from store_provisioner.app.entities.store.table import StoreRecord
from store_provisioner.app.runtime.config.config_data import (
    DatabaseConfig,
    ProvisioningConfig,
)
from store_provisioner.infra.driver.base import InfrastructureDriver
from store_provisioner.infra.k8s.controller import CommandResult
from store_provisioner.infra.k8s.prober import ReadinessProber

__all__ = [
    "db_service",
    "fake_driver",
    "fake_prober",
    "lifecycle_store",
    "make_store",
    "orchestrator",
    "provisioning_config",
    "supervisor",
]


@pytest.fixture
def db_service(tmp_path: Path) -> Iterator[DbSessionService]:
    """File-backed SQLite database with all lifecycle tables created.

    A file rather than :memory: so repository calls made from worker threads
    each get their own connection.
    """
    url = f"sqlite:///{tmp_path / 'lifecycle.db'}"
    service = DbSessionService(DatabaseConfig(url=url))
    DbManageService(service).create_all()
    yield service
    service.dispose()


@pytest.fixture
def lifecycle_store(db_service: DbSessionService) -> LifecycleStore:
    return LifecycleStore(db_service)


@pytest.fixture
def provisioning_config() -> ProvisioningConfig:
    return ProvisioningConfig(
        base_domain="test.local",
        max_concurrent=2,
        readiness_max_attempts=3,
        readiness_interval_seconds=0,
        stale_job_threshold_seconds=900,
        shutdown_grace_seconds=0,
    )


@pytest.fixture
def fake_driver() -> MagicMock:
    """Infrastructure driver whose operations all succeed."""
    driver = MagicMock(spec=InfrastructureDriver)
    driver.install = AsyncMock(
        return_value=CommandResult(success=True, stdout="STATUS: deployed")
    )
    driver.uninstall = AsyncMock(
        return_value=CommandResult(success=True, stdout="release uninstalled")
    )
    driver.delete_namespace = AsyncMock(
        return_value=CommandResult(success=True, stdout="namespace deleted")
    )
    driver.status = AsyncMock(return_value=None)
    driver.available = AsyncMock(return_value=True)
    return driver


@pytest.fixture
def fake_prober() -> MagicMock:
    """Readiness prober that reports ready immediately."""
    prober = MagicMock(spec=ReadinessProber)
    prober.wait_ready = AsyncMock(return_value=None)
    return prober


@pytest.fixture
def supervisor(provisioning_config: ProvisioningConfig) -> TaskSupervisor:
    return TaskSupervisor(provisioning_config.max_concurrent)


@pytest.fixture
def orchestrator(
    lifecycle_store: LifecycleStore,
    fake_driver: MagicMock,
    fake_prober: MagicMock,
    supervisor: TaskSupervisor,
    provisioning_config: ProvisioningConfig,
) -> StoreOrchestrator:
    return StoreOrchestrator(
        lifecycle_store, fake_driver, fake_prober, supervisor, provisioning_config
    )


def make_store(
    repository: LifecycleStore,
    name: str,
    *,
    engine: StoreEngine = StoreEngine.WOOCOMMERCE,
    created_at: datetime | None = None,
) -> StoreRecord:
    """Insert a pending store with its pending provision job."""
    store = StoreRecord(
        name=name,
        engine=engine,
        plan=StorePlan.BASIC,
        status=StoreStatus.PENDING,
    )
    if created_at is not None:
        store.created_at = created_at
    saved, _ = repository.create_store_with_job(store, JobType.PROVISION)
    return saved
