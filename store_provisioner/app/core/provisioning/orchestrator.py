"""Store lifecycle orchestration.

`StoreOrchestrator` is the only writer of store status, job rows and audit
events. Its public entry points validate synchronously and then hand the
long-running work to the `TaskSupervisor`:

    create()  -> pending   --(provision task)-->   provisioning -> running
    delete()  -> deleting  --(deprovision task)--> deleted

Any failure inside a detached task is recorded on the store
(`status_message`), on the job (`error`) and as a `*_failed` event. Nothing
is retried automatically.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger

from store_provisioner.app.core.engines import EngineProfile, engine_profile
from store_provisioner.app.core.errors import (
    ConflictError,
    DriverFailureError,
    InvalidTransitionError,
    ShuttingDownError,
    StoreNotFoundError,
    StoreProvisionerError,
)
from store_provisioner.app.core.models.enums import (
    ACTIVE_JOB_STATUSES,
    DELETE_REJECTED_STATUSES,
    EventType,
    JobStatus,
    JobType,
    StoreEngine,
    StoreStatus,
)
from store_provisioner.app.core.models.requests import StoreCreateRequest
from store_provisioner.app.core.provisioning.supervisor import (
    SupervisorClosedError,
    TaskSupervisor,
)
from store_provisioner.app.core.provisioning.values import (
    admin_url,
    build_helm_values,
    resource_name,
    storefront_url,
)
from store_provisioner.app.core.services.lifecycle_store import LifecycleStore, StorePage
from store_provisioner.app.entities.columns import utcnow
from store_provisioner.app.entities.event.table import EventRecord
from store_provisioner.app.entities.job.table import JobRecord
from store_provisioner.app.entities.store.table import StoreRecord
from store_provisioner.app.runtime.config.config_data import ProvisioningConfig
from store_provisioner.infra.driver.base import InfrastructureDriver
from store_provisioner.infra.k8s.prober import ReadinessProber
from store_provisioner.infra.shell.types import HelmRelease

PROVISION_INTERRUPTED = "Provisioning interrupted by shutdown"
DELETE_INTERRUPTED = "Deletion failed: interrupted by shutdown"

_DELETE_CONFLICT_MESSAGES = {
    StoreStatus.PROVISIONING: "Store is still being provisioned",
    StoreStatus.DELETING: "Store is already being deleted",
    StoreStatus.DELETED: "Store has already been deleted",
}


@dataclass
class StoreDetail:
    store: StoreRecord
    latest_job: JobRecord | None


class StoreOrchestrator:
    def __init__(
        self,
        repository: LifecycleStore,
        driver: InfrastructureDriver,
        prober: ReadinessProber,
        supervisor: TaskSupervisor,
        settings: ProvisioningConfig,
    ) -> None:
        self._repo = repository
        self._driver = driver
        self._prober = prober
        self._supervisor = supervisor
        self._settings = settings

    async def _db[**P, T](
        self, call: Callable[P, T], *args: P.args, **kwargs: P.kwargs
    ) -> T:
        """Run a blocking repository call on a worker thread."""
        return await asyncio.to_thread(call, *args, **kwargs)

    def _ensure_accepting(self) -> None:
        if not self._supervisor.accepting:
            raise ShuttingDownError("Service is shutting down, try again later")

    # =========================================================================
    # Entry points
    # =========================================================================

    async def create(
        self, request: StoreCreateRequest, actor: str | None = None
    ) -> StoreRecord:
        """Accept a store request and start provisioning in the background.

        Returns the stored record with status `pending`.

        Raises:
            UnsupportedEngineError: If the engine cannot be provisioned yet
            ConflictError: If a non-deleted store already uses the name
            ShuttingDownError: If the process is draining its tasks
        """
        profile = engine_profile(request.engine)
        self._ensure_accepting()

        existing = await self._db(self._repo.find_active_store_by_name, request.name)
        if existing is not None:
            raise ConflictError(f"Store with name '{request.name}' already exists")

        store, job = await self._db(
            self._repo.create_store_with_job,
            StoreRecord(
                name=request.name,
                display_name=request.display_name,
                description=request.description,
                engine=request.engine,
                plan=request.plan,
                status=StoreStatus.PENDING,
                created_by=actor,
            ),
            JobType.PROVISION,
        )
        logger.info(f"Store created: {store.name} ({store.id}), job {job.id}")

        store_id = store.id
        await self._submit(
            store_id,
            JobType.PROVISION,
            lambda: self._provision(store_id, profile),
            PROVISION_INTERRUPTED,
        )
        return store

    async def delete(self, store_id: str) -> None:
        """Accept a delete request and tear the store down in the background.

        Raises:
            StoreNotFoundError: If the store does not exist
            ConflictError: If the store is provisioning, already deleting or
                deleted, or another lifecycle task for it is still active
            ShuttingDownError: If the process is draining its tasks
        """
        self._ensure_accepting()
        store = await self._db(self._repo.get_store, store_id)
        if store is None:
            raise StoreNotFoundError(store_id)

        if store.status in DELETE_REJECTED_STATUSES:
            raise ConflictError(_DELETE_CONFLICT_MESSAGES[store.status])
        if self._supervisor.is_active(store_id):
            raise ConflictError("Another operation is still in progress for this store")

        try:
            store = await self._db(
                self._repo.transition_store,
                store_id,
                StoreStatus.DELETING,
                status_message="Deleting store...",
            )
        except InvalidTransitionError as e:
            raise ConflictError("Store is already being deleted") from e

        # A provision job that never got a slot will not run anymore.
        await self._db(
            self._repo.update_job,
            store_id,
            JobType.PROVISION,
            from_statuses=ACTIVE_JOB_STATUSES,
            status=JobStatus.FAILED,
            error="Superseded by delete request",
            completed_at=utcnow(),
        )
        await self._db(
            self._repo.create_job,
            store_id,
            JobType.DELETE,
            JobStatus.RUNNING,
            started_at=utcnow(),
        )
        logger.info(f"Deleting store {store.name} ({store_id})")

        await self._submit(
            store_id, JobType.DELETE, lambda: self._deprovision(store), DELETE_INTERRUPTED
        )

    async def _submit(
        self,
        store_id: str,
        job_type: JobType,
        work: Callable[[], Awaitable[None]],
        interrupted_message: str,
    ) -> None:
        try:
            self._supervisor.submit(
                store_id,
                job_type.value,
                work,
                on_abandoned=lambda: self._record_failure(
                    store_id, job_type, interrupted_message
                ),
            )
        except SupervisorClosedError as e:
            # Draining started while the rows were being written.
            await self._record_failure(store_id, job_type, interrupted_message)
            raise ShuttingDownError("Service is shutting down, try again later") from e

    def get(self, store_id: str) -> StoreDetail | None:
        store = self._repo.get_store(store_id)
        if store is None:
            return None
        return StoreDetail(store=store, latest_job=self._repo.get_latest_job(store_id))

    def list_stores(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        status: StoreStatus | None = None,
        engine: StoreEngine | None = None,
    ) -> StorePage:
        return self._repo.list_stores(page=page, limit=limit, status=status, engine=engine)

    def events(self, store_id: str) -> list[EventRecord]:
        """Audit trail of a store in the order it was written.

        Raises:
            StoreNotFoundError: If the store does not exist
        """
        if self._repo.get_store(store_id) is None:
            raise StoreNotFoundError(store_id)
        return self._repo.list_events(store_id)

    def jobs(self, store_id: str) -> list[JobRecord]:
        """Every job of a store, oldest first.

        Raises:
            StoreNotFoundError: If the store does not exist
        """
        if self._repo.get_store(store_id) is None:
            raise StoreNotFoundError(store_id)
        return self._repo.list_jobs(store_id)

    async def release_status(self, store: StoreRecord) -> HelmRelease | None:
        """Live status of the store's release, None when nothing is installed."""
        if not (store.helm_release and store.namespace):
            return None
        return await self._driver.status(store.helm_release, store.namespace)

    # =========================================================================
    # Detached work
    # =========================================================================

    async def _provision(self, store_id: str, profile: EngineProfile) -> None:
        name = resource_name(store_id)
        logger.info(f"Starting store provisioning for {store_id} in {name}")

        try:
            store = await self._db(
                self._repo.transition_store,
                store_id,
                StoreStatus.PROVISIONING,
                status_message="Starting provisioning...",
                namespace=name,
                helm_release=name,
            )
            await self._db(
                self._repo.append_event,
                store_id,
                EventType.PROVISIONING_STARTED,
                "Provisioning started",
            )
            await self._db(
                self._repo.update_job,
                store_id,
                JobType.PROVISION,
                from_statuses=[JobStatus.PENDING],
                status=JobStatus.RUNNING,
                started_at=utcnow(),
                current_step="Creating release",
                progress=10,
            )

            values = build_helm_values(store, profile, self._settings)
            result = await self._driver.install(name, name, values)
            if not result.success:
                raise DriverFailureError(f"Helm install failed: {result.message}")

            await self._db(
                self._repo.update_job,
                store_id,
                JobType.PROVISION,
                from_statuses=[JobStatus.RUNNING],
                current_step="Waiting for readiness",
                progress=50,
            )
            await self._prober.wait_ready(
                name,
                profile.deployment_name(store.name),
                max_attempts=self._settings.readiness_max_attempts,
                interval=self._settings.readiness_interval_seconds,
            )

            base_domain = self._settings.base_domain
            await self._db(
                self._repo.transition_store,
                store_id,
                StoreStatus.RUNNING,
                status_message="Store is running",
                url=storefront_url(store, base_domain),
                admin_url=admin_url(store, base_domain, profile),
                admin_username=profile.admin_username,
                admin_password_secret=profile.credentials_secret(store.name),
            )
            await self._db(
                self._repo.append_event,
                store_id,
                EventType.PROVISIONING_COMPLETED,
                "Store is running",
            )
            await self._db(
                self._repo.update_job,
                store_id,
                JobType.PROVISION,
                from_statuses=[JobStatus.RUNNING],
                status=JobStatus.COMPLETED,
                current_step="Completed",
                progress=100,
                completed_at=utcnow(),
            )
            logger.info(f"Store provisioning completed for {store_id}")

        except asyncio.CancelledError:
            await self._record_failure(store_id, JobType.PROVISION, PROVISION_INTERRUPTED)
            raise
        except StoreProvisionerError as e:
            await self._record_failure(store_id, JobType.PROVISION, e.message)
        except Exception as e:
            logger.exception(f"Unexpected error provisioning store {store_id}")
            await self._record_failure(
                store_id, JobType.PROVISION, f"Internal error: {e}"
            )

    async def _deprovision(self, store: StoreRecord) -> None:
        store_id = store.id
        try:
            await self._db(
                self._repo.append_event,
                store_id,
                EventType.DELETION_STARTED,
                "Starting deletion",
            )

            if store.namespace and store.helm_release:
                await self._delete_step(store_id, "Uninstalling release", 10)
                result = await self._driver.uninstall(store.helm_release, store.namespace)
                if not result.success:
                    raise DriverFailureError(result.message)

                await self._delete_step(store_id, "Deleting namespace", 60)
                result = await self._driver.delete_namespace(store.namespace)
                if not result.success:
                    raise DriverFailureError(result.message)

            await self._db(
                self._repo.transition_store,
                store_id,
                StoreStatus.DELETED,
                status_message="Store deleted",
                deleted_at=utcnow(),
            )
            await self._db(
                self._repo.append_event,
                store_id,
                EventType.DELETION_COMPLETED,
                "Store deleted",
            )
            await self._db(
                self._repo.update_job,
                store_id,
                JobType.DELETE,
                from_statuses=[JobStatus.RUNNING],
                status=JobStatus.COMPLETED,
                current_step="Completed",
                progress=100,
                completed_at=utcnow(),
            )
            logger.info(f"Store deleted: {store.name} ({store_id})")

        except asyncio.CancelledError:
            await self._record_failure(store_id, JobType.DELETE, DELETE_INTERRUPTED)
            raise
        except StoreProvisionerError as e:
            await self._record_failure(
                store_id, JobType.DELETE, f"Deletion failed: {e.message}"
            )
        except Exception as e:
            logger.exception(f"Unexpected error deleting store {store_id}")
            await self._record_failure(store_id, JobType.DELETE, f"Deletion failed: {e}")

    async def _delete_step(self, store_id: str, step: str, progress: int) -> None:
        await self._db(
            self._repo.update_job,
            store_id,
            JobType.DELETE,
            from_statuses=[JobStatus.RUNNING],
            current_step=step,
            progress=progress,
        )

    async def _record_failure(
        self, store_id: str, job_type: JobType, message: str
    ) -> None:
        logger.error(f"{job_type.value} failed for store {store_id}: {message}")
        await self._db(self._write_failure, store_id, job_type, message)

    def _write_failure(self, store_id: str, job_type: JobType, message: str) -> None:
        try:
            self._repo.transition_store(
                store_id, StoreStatus.FAILED, status_message=message
            )
        except InvalidTransitionError as e:
            logger.warning(f"Store {store_id} not marked failed: {e.message}")

        self._repo.append_event(store_id, EventType.failed_for(job_type), message)
        self._repo.update_job(
            store_id,
            job_type,
            from_statuses=ACTIVE_JOB_STATUSES,
            status=JobStatus.FAILED,
            error=message,
            completed_at=utcnow(),
        )
