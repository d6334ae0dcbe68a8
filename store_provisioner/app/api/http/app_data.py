from dataclasses import dataclass

from store_provisioner.app.core.provisioning import StoreOrchestrator, TaskSupervisor
from store_provisioner.app.core.services import DbSessionService, LifecycleStore
from store_provisioner.app.runtime.config.config_data import ConfigData
from store_provisioner.infra.driver import HelmDriver, InfrastructureDriver
from store_provisioner.infra.k8s import ReadinessProber, get_k8s_controller
from store_provisioner.infra.shell import CommandRunner, HelmCommands


@dataclass
class ApplicationDependencies:
    config: ConfigData
    database_service: DbSessionService
    lifecycle_store: LifecycleStore
    driver: InfrastructureDriver
    prober: ReadinessProber
    supervisor: TaskSupervisor
    orchestrator: StoreOrchestrator


def build_helm_driver(config: ConfigData) -> HelmDriver:
    return HelmDriver(
        HelmCommands(CommandRunner(), binary=config.helm.binary),
        get_k8s_controller(),
        config.helm.chart_path,
        timeout_seconds=config.helm.timeout_seconds,
    )


def build_application_dependencies(
    config: ConfigData,
    *,
    driver: InfrastructureDriver | None = None,
    prober: ReadinessProber | None = None,
) -> ApplicationDependencies:
    """Wire the services of one process from its configuration.

    `driver` and `prober` default to the Helm/kr8s implementations.
    """
    database_service = DbSessionService(config.database)
    lifecycle_store = LifecycleStore(database_service)
    driver = driver or build_helm_driver(config)
    prober = prober or ReadinessProber(get_k8s_controller())
    supervisor = TaskSupervisor(config.provisioning.max_concurrent)

    return ApplicationDependencies(
        config=config,
        database_service=database_service,
        lifecycle_store=lifecycle_store,
        driver=driver,
        prober=prober,
        supervisor=supervisor,
        orchestrator=StoreOrchestrator(
            lifecycle_store, driver, prober, supervisor, config.provisioning
        ),
    )
