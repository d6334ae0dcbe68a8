"""Unit tests for the store lifecycle orchestrator.

The database is a real SQLite file; the driver and prober are mocks.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from store_provisioner.app.core.errors import (
    ConflictError,
    ReadinessTimeoutError,
    ShuttingDownError,
    StoreNotFoundError,
    UnsupportedEngineError,
)
from store_provisioner.app.core.models import (
    EventType,
    JobStatus,
    JobType,
    StoreCreateRequest,
    StoreEngine,
    StoreStatus,
)
from store_provisioner.app.core.provisioning import (
    StoreOrchestrator,
    SupervisorClosedError,
    TaskSupervisor,
)
from store_provisioner.app.core.services import LifecycleStore
from store_provisioner.app.runtime.config.config_data import ProvisioningConfig
from store_provisioner.infra.driver import HelmDriver
from store_provisioner.infra.k8s.controller import CommandResult, KubernetesController
from store_provisioner.infra.shell import HelmCommands, HelmRelease
from tests.fixtures import make_store


def _request(name: str = "shop-1", engine: StoreEngine = StoreEngine.WOOCOMMERCE):
    return StoreCreateRequest(name=name, engine=engine)


def _event_types(repository: LifecycleStore, store_id: str) -> list[EventType]:
    return [e.event_type for e in repository.list_events(store_id)]


class TestCreate:
    """Tests for accepting store requests."""

    async def test_create_returns_pending_store_with_pending_job(
        self, orchestrator: StoreOrchestrator, lifecycle_store: LifecycleStore
    ) -> None:
        """The request returns before provisioning starts."""
        store = await orchestrator.create(_request(), actor="user-1")

        assert store.status == StoreStatus.PENDING
        assert store.created_by == "user-1"
        job = lifecycle_store.get_latest_job(store.id)
        assert job is not None
        assert job.job_type == JobType.PROVISION
        assert job.status == JobStatus.PENDING
        assert job.progress == 0

    async def test_medusa_is_rejected_and_nothing_persisted(
        self, orchestrator: StoreOrchestrator, lifecycle_store: LifecycleStore
    ) -> None:
        with pytest.raises(UnsupportedEngineError):
            await orchestrator.create(_request("shop-2", StoreEngine.MEDUSA))

        assert lifecycle_store.list_stores().total == 0
        assert lifecycle_store.find_active_store_by_name("shop-2") is None

    async def test_duplicate_name_is_conflict(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
    ) -> None:
        await orchestrator.create(_request())

        with pytest.raises(ConflictError, match="already exists"):
            await orchestrator.create(_request())

        await supervisor.wait_idle()
        assert lifecycle_store.list_stores().total == 1

    async def test_name_can_be_reused_after_deletion(
        self, orchestrator: StoreOrchestrator, supervisor: TaskSupervisor
    ) -> None:
        first = await orchestrator.create(_request())
        await supervisor.wait_idle()
        await orchestrator.delete(first.id)
        await supervisor.wait_idle()

        second = await orchestrator.create(_request())

        assert second.id != first.id
        assert second.status == StoreStatus.PENDING

    async def test_repository_writes_run_off_the_event_loop(
        self, orchestrator: StoreOrchestrator, supervisor: TaskSupervisor
    ) -> None:
        loop_thread = threading.get_ident()
        seen: list[int] = []
        create_store_with_job = LifecycleStore.create_store_with_job

        def record_thread(self: LifecycleStore, *args: Any, **kwargs: Any) -> Any:
            seen.append(threading.get_ident())
            return create_store_with_job(self, *args, **kwargs)

        with patch.object(LifecycleStore, "create_store_with_job", record_thread):
            await orchestrator.create(_request())
        await supervisor.wait_idle()

        assert len(seen) == 1
        assert seen[0] != loop_thread


class TestProvision:
    """Tests for the detached provisioning flow."""

    async def test_successful_provision_reaches_running(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
        fake_prober: MagicMock,
    ) -> None:
        """shop-1 on woocommerce/basic ends up running with its public URLs."""
        created = await orchestrator.create(_request())
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(created.id)
        assert store is not None
        assert store.status == StoreStatus.RUNNING
        assert store.status_message == "Store is running"
        assert store.namespace == f"store-{store.id}"
        assert store.helm_release == f"store-{store.id}"
        assert store.url == f"https://shop-1-{store.id}.test.local"
        assert store.admin_url == f"https://shop-1-{store.id}.test.local/wp-admin"
        assert store.admin_username == "admin"
        assert store.admin_password_secret == "store-shop-1-wordpress-credentials"

        job = lifecycle_store.get_latest_job(store.id)
        assert job is not None
        assert job.status == JobStatus.COMPLETED
        assert job.progress == 100
        assert job.started_at is not None
        assert job.completed_at is not None

        assert _event_types(lifecycle_store, store.id) == [
            EventType.PROVISIONING_STARTED,
            EventType.PROVISIONING_COMPLETED,
        ]

    async def test_driver_and_prober_receive_store_resources(
        self,
        orchestrator: StoreOrchestrator,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
        fake_prober: MagicMock,
    ) -> None:
        created = await orchestrator.create(_request())
        await supervisor.wait_idle()

        name = f"store-{created.id}"
        release, namespace, values = fake_driver.install.call_args.args
        assert (release, namespace) == (name, name)
        assert values["store"]["name"] == "shop-1"
        assert values["global"]["baseDomain"] == "test.local"
        assert values["wordpress"]["site"]["url"] == f"shop-1-{created.id}.test.local"

        fake_prober.wait_ready.assert_awaited_once()
        assert fake_prober.wait_ready.call_args.args == (name, "store-shop-1-wordpress")
        assert fake_prober.wait_ready.call_args.kwargs == {
            "max_attempts": 3,
            "interval": 0,
        }

    async def test_install_failure_marks_store_failed(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
        fake_prober: MagicMock,
    ) -> None:
        fake_driver.install.return_value = CommandResult(
            success=False, stderr="Error: chart not found", returncode=1
        )

        created = await orchestrator.create(_request())
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(created.id)
        assert store is not None
        assert store.status == StoreStatus.FAILED
        assert "chart not found" in (store.status_message or "")
        assert store.url is None
        assert store.admin_url is None

        job = lifecycle_store.get_latest_job(store.id)
        assert job is not None
        assert job.status == JobStatus.FAILED
        assert job.error
        assert _event_types(lifecycle_store, store.id)[-1] == EventType.PROVISIONING_FAILED
        fake_prober.wait_ready.assert_not_awaited()

    async def test_readiness_timeout_marks_store_failed(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_prober: MagicMock,
    ) -> None:
        fake_prober.wait_ready.side_effect = ReadinessTimeoutError(
            "Timeout waiting for store to be ready"
        )

        created = await orchestrator.create(_request())
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(created.id)
        assert store is not None
        assert store.status == StoreStatus.FAILED
        assert "Timeout" in (store.status_message or "")
        assert store.url is None

        job = lifecycle_store.get_latest_job(store.id)
        assert job is not None
        assert job.status == JobStatus.FAILED
        assert job.progress == 50

    async def test_unexpected_error_is_recorded_as_internal_failure(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
    ) -> None:
        fake_driver.install.side_effect = RuntimeError("boom")

        created = await orchestrator.create(_request())
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(created.id)
        assert store is not None
        assert store.status == StoreStatus.FAILED
        assert store.status_message == "Internal error: boom"
        outcome = supervisor.last_outcome(created.id)
        assert outcome is not None
        assert outcome.completed

    async def test_shutdown_cancellation_records_failure(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
    ) -> None:
        install_started = asyncio.Event()

        async def hang(*args: object, **kwargs: object) -> CommandResult:
            install_started.set()
            await asyncio.Event().wait()
            return CommandResult(success=True)

        fake_driver.install.side_effect = hang

        created = await orchestrator.create(_request())
        await install_started.wait()
        await supervisor.drain(timeout=0)

        store = lifecycle_store.get_store(created.id)
        assert store is not None
        assert store.status == StoreStatus.FAILED
        assert "interrupted" in (store.status_message or "")
        job = lifecycle_store.get_latest_job(store.id)
        assert job is not None
        assert job.status == JobStatus.FAILED

    async def test_queued_provision_cancelled_by_shutdown_is_failed(
        self,
        lifecycle_store: LifecycleStore,
        fake_driver: MagicMock,
        fake_prober: MagicMock,
        provisioning_config: ProvisioningConfig,
    ) -> None:
        """A store still waiting for a slot ends failed, not stuck pending."""
        supervisor = TaskSupervisor(1)
        orchestrator = StoreOrchestrator(
            lifecycle_store, fake_driver, fake_prober, supervisor, provisioning_config
        )
        install_started = asyncio.Event()

        async def hang(*args: object, **kwargs: object) -> CommandResult:
            install_started.set()
            await asyncio.Event().wait()
            return CommandResult(success=True)

        fake_driver.install.side_effect = hang

        first = await orchestrator.create(_request("shop-1"))
        queued = await orchestrator.create(_request("shop-2"))
        await install_started.wait()
        await supervisor.drain(timeout=0)

        store = lifecycle_store.get_store(queued.id)
        assert store is not None
        assert store.status == StoreStatus.FAILED
        assert store.status_message == "Provisioning interrupted by shutdown"
        job = lifecycle_store.get_latest_job(queued.id)
        assert job is not None
        assert job.status == JobStatus.FAILED
        assert job.error == "Provisioning interrupted by shutdown"
        assert _event_types(lifecycle_store, queued.id) == [
            EventType.PROVISIONING_FAILED
        ]
        outcome = supervisor.last_outcome(queued.id)
        assert outcome is not None
        assert outcome.error == "cancelled before start"

        assert lifecycle_store.get_store(first.id).status == StoreStatus.FAILED  # type: ignore[union-attr]
        fake_driver.install.assert_awaited_once()


class TestDelete:
    """Tests for accepting and running store deletion."""

    async def _running_store(
        self, orchestrator: StoreOrchestrator, supervisor: TaskSupervisor
    ) -> str:
        created = await orchestrator.create(_request())
        await supervisor.wait_idle()
        return created.id

    async def test_delete_reaches_deleted(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
    ) -> None:
        store_id = await self._running_store(orchestrator, supervisor)

        await orchestrator.delete(store_id)
        assert lifecycle_store.get_store(store_id).status == StoreStatus.DELETING  # type: ignore[union-attr]
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(store_id)
        assert store is not None
        assert store.status == StoreStatus.DELETED
        assert store.deleted_at is not None
        fake_driver.uninstall.assert_awaited_once_with(f"store-{store_id}", f"store-{store_id}")
        fake_driver.delete_namespace.assert_awaited_once_with(f"store-{store_id}")

        job = lifecycle_store.get_latest_job(store_id)
        assert job is not None
        assert job.job_type == JobType.DELETE
        assert job.status == JobStatus.COMPLETED
        assert job.progress == 100
        assert _event_types(lifecycle_store, store_id)[-2:] == [
            EventType.DELETION_STARTED,
            EventType.DELETION_COMPLETED,
        ]
        assert lifecycle_store.list_stores().total == 0

    async def test_second_delete_is_conflict(
        self, orchestrator: StoreOrchestrator, supervisor: TaskSupervisor
    ) -> None:
        store_id = await self._running_store(orchestrator, supervisor)

        await orchestrator.delete(store_id)
        with pytest.raises(ConflictError):
            await orchestrator.delete(store_id)

        await supervisor.wait_idle()
        with pytest.raises(ConflictError, match="already been deleted"):
            await orchestrator.delete(store_id)

    async def test_delete_unknown_store_is_not_found(
        self, orchestrator: StoreOrchestrator
    ) -> None:
        with pytest.raises(StoreNotFoundError):
            await orchestrator.delete("does-not-exist")

    async def test_delete_while_provision_task_active_is_conflict(
        self, orchestrator: StoreOrchestrator, supervisor: TaskSupervisor
    ) -> None:
        created = await orchestrator.create(_request())

        with pytest.raises(ConflictError):
            await orchestrator.delete(created.id)

        await supervisor.wait_idle()

    async def test_uninstall_failure_marks_store_failed(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
    ) -> None:
        store_id = await self._running_store(orchestrator, supervisor)
        fake_driver.uninstall.return_value = CommandResult(
            success=False, stderr="Kubernetes cluster unreachable", returncode=1
        )

        await orchestrator.delete(store_id)
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(store_id)
        assert store is not None
        assert store.status == StoreStatus.FAILED
        assert store.status_message == "Deletion failed: Kubernetes cluster unreachable"
        assert store.deleted_at is None
        fake_driver.delete_namespace.assert_not_awaited()
        job = lifecycle_store.get_latest_job(store_id)
        assert job is not None
        assert job.status == JobStatus.FAILED
        assert _event_types(lifecycle_store, store_id)[-1] == EventType.DELETION_FAILED

    async def test_failed_store_can_be_deleted(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
    ) -> None:
        fake_driver.install.return_value = CommandResult(success=False, stderr="nope")
        created = await orchestrator.create(_request())
        await supervisor.wait_idle()

        await orchestrator.delete(created.id)
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(created.id)
        assert store is not None
        assert store.status == StoreStatus.DELETED

    async def test_pending_store_without_task_supersedes_provision_job(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
    ) -> None:
        """A pending store left behind by a restart can be deleted directly."""
        store = make_store(lifecycle_store, "shop-1")

        await orchestrator.delete(store.id)
        await supervisor.wait_idle()

        jobs = {job.job_type: job for job in orchestrator.jobs(store.id)}
        assert jobs[JobType.PROVISION].status == JobStatus.FAILED
        assert jobs[JobType.PROVISION].error == "Superseded by delete request"
        assert jobs[JobType.PROVISION].completed_at is not None
        assert jobs[JobType.DELETE].status == JobStatus.COMPLETED

    async def test_store_without_release_skips_driver(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
    ) -> None:
        store = make_store(lifecycle_store, "shop-1")

        await orchestrator.delete(store.id)
        await supervisor.wait_idle()

        deleted = lifecycle_store.get_store(store.id)
        assert deleted is not None
        assert deleted.status == StoreStatus.DELETED
        assert deleted.deleted_at is not None
        fake_driver.uninstall.assert_not_awaited()
        fake_driver.delete_namespace.assert_not_awaited()
        assert _event_types(lifecycle_store, store.id) == [
            EventType.DELETION_STARTED,
            EventType.DELETION_COMPLETED,
        ]

    async def test_missing_release_still_reaches_deleted(
        self,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
        fake_prober: MagicMock,
        provisioning_config: ProvisioningConfig,
    ) -> None:
        """Helm reporting the release as gone is treated as already uninstalled."""
        helm = MagicMock(spec=HelmCommands)
        helm.upgrade_install.return_value = CommandResult(success=True, stdout="deployed")
        helm.uninstall.return_value = CommandResult(
            success=False,
            stderr="Error: uninstall: Release not loaded: store-x: release: not found",
            returncode=1,
        )
        controller = MagicMock(spec=KubernetesController)
        controller.create_namespace = AsyncMock(return_value=CommandResult(success=True))
        controller.delete_namespace = AsyncMock(return_value=CommandResult(success=True))
        driver = HelmDriver(
            helm, controller, Path("/charts/woocommerce"), timeout_seconds=60
        )
        orchestrator = StoreOrchestrator(
            lifecycle_store, driver, fake_prober, supervisor, provisioning_config
        )

        created = await orchestrator.create(_request())
        await supervisor.wait_idle()
        await orchestrator.delete(created.id)
        await supervisor.wait_idle()

        store = lifecycle_store.get_store(created.id)
        assert store is not None
        assert store.status == StoreStatus.DELETED
        job = lifecycle_store.get_latest_job(created.id)
        assert job is not None
        assert job.job_type == JobType.DELETE
        assert job.status == JobStatus.COMPLETED
        controller.delete_namespace.assert_awaited_once()


class TestShutdown:
    """New work is refused once the supervisor is draining."""

    async def test_create_after_drain_persists_nothing(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
    ) -> None:
        await supervisor.drain(timeout=0)

        with pytest.raises(ShuttingDownError):
            await orchestrator.create(_request())

        assert lifecycle_store.list_stores().total == 0

    async def test_delete_after_drain_leaves_store_untouched(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
    ) -> None:
        store = make_store(lifecycle_store, "shop-1")
        await supervisor.drain(timeout=0)

        with pytest.raises(ShuttingDownError):
            await orchestrator.delete(store.id)

        assert lifecycle_store.get_store(store.id).status == StoreStatus.PENDING  # type: ignore[union-attr]

    async def test_refused_submit_records_failure(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        supervisor: TaskSupervisor,
    ) -> None:
        """Draining can start after the rows are written; the store is failed."""
        with patch.object(
            supervisor,
            "submit",
            side_effect=SupervisorClosedError("Task supervisor is shutting down"),
        ):
            with pytest.raises(ShuttingDownError):
                await orchestrator.create(_request())

        (store,) = lifecycle_store.list_stores().stores
        assert store.status == StoreStatus.FAILED
        assert store.status_message == "Provisioning interrupted by shutdown"
        job = lifecycle_store.get_latest_job(store.id)
        assert job is not None
        assert job.status == JobStatus.FAILED


class TestQueries:
    async def test_get_returns_store_with_latest_job(
        self, orchestrator: StoreOrchestrator, supervisor: TaskSupervisor
    ) -> None:
        created = await orchestrator.create(_request())
        await supervisor.wait_idle()

        detail = orchestrator.get(created.id)

        assert detail is not None
        assert detail.store.id == created.id
        assert detail.latest_job is not None
        assert detail.latest_job.status == JobStatus.COMPLETED

    def test_get_unknown_store_returns_none(self, orchestrator: StoreOrchestrator) -> None:
        assert orchestrator.get("missing") is None

    def test_events_for_unknown_store_is_not_found(
        self, orchestrator: StoreOrchestrator
    ) -> None:
        with pytest.raises(StoreNotFoundError):
            orchestrator.events("missing")

    async def test_jobs_lists_history(
        self, orchestrator: StoreOrchestrator, supervisor: TaskSupervisor
    ) -> None:
        created = await orchestrator.create(_request())
        await supervisor.wait_idle()
        await orchestrator.delete(created.id)
        await supervisor.wait_idle()

        jobs = orchestrator.jobs(created.id)

        assert {job.job_type for job in jobs} == {JobType.PROVISION, JobType.DELETE}
        assert all(job.status == JobStatus.COMPLETED for job in jobs)

    def test_jobs_for_unknown_store_is_not_found(
        self, orchestrator: StoreOrchestrator
    ) -> None:
        with pytest.raises(StoreNotFoundError):
            orchestrator.jobs("missing")

    async def test_release_status_queries_driver(
        self,
        orchestrator: StoreOrchestrator,
        supervisor: TaskSupervisor,
        fake_driver: MagicMock,
    ) -> None:
        created = await orchestrator.create(_request())
        await supervisor.wait_idle()
        name = f"store-{created.id}"
        fake_driver.status.return_value = HelmRelease(
            name=name, namespace=name, status="deployed", revision="1"
        )
        detail = orchestrator.get(created.id)
        assert detail is not None

        release = await orchestrator.release_status(detail.store)

        assert release is not None
        assert release.status == "deployed"
        fake_driver.status.assert_awaited_once_with(name, name)

    async def test_release_status_without_release(
        self,
        orchestrator: StoreOrchestrator,
        lifecycle_store: LifecycleStore,
        fake_driver: MagicMock,
    ) -> None:
        store = make_store(lifecycle_store, "shop-1")

        assert await orchestrator.release_status(store) is None
        fake_driver.status.assert_not_awaited()
