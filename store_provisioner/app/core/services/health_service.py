"""Health check service for application dependencies.

The two readiness checks, database reachability and driver availability,
are run independently so one failing never hides the state of the other.
Both the HTTP readiness endpoint and the CLI use this service.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from store_provisioner.app.api.http.schemas.health import (
    AllServicesHealth,
    DatabaseHealth,
    DriverHealth,
    OverallStatus,
    ReadinessResponse,
    ServiceStatus,
)

if TYPE_CHECKING:
    from store_provisioner.app.core.services.lifecycle_store import LifecycleStore
    from store_provisioner.app.runtime.config.config_data import ConfigData
    from store_provisioner.infra.driver.base import InfrastructureDriver


class HealthCheckService:
    """Runs readiness checks against the database and the infrastructure driver.

    Example:
        ```python
        health_service = HealthCheckService(repository, driver, config)
        result = await health_service.check_all()
        if result.status == OverallStatus.READY:
            print("All systems go!")
        ```
    """

    def __init__(
        self,
        repository: LifecycleStore,
        driver: InfrastructureDriver,
        config: ConfigData,
    ) -> None:
        self._repository = repository
        self._driver = driver
        self._config = config

    async def check_all(self) -> ReadinessResponse:
        database = await self.check_database()
        driver = await self.check_driver()

        healthy = (
            database.status == ServiceStatus.HEALTHY
            and driver.status == ServiceStatus.HEALTHY
        )
        return ReadinessResponse(
            status=OverallStatus.READY if healthy else OverallStatus.NOT_READY,
            environment=self._config.app.environment,
            checks=AllServicesHealth(database=database, driver=driver),
        )

    async def check_database(self) -> DatabaseHealth:
        db_type = self._get_database_type()

        try:
            healthy = await asyncio.to_thread(self._repository.health_check)
            return DatabaseHealth(
                status=ServiceStatus.HEALTHY if healthy else ServiceStatus.UNHEALTHY,
                type=db_type,
            )
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return DatabaseHealth(
                status=ServiceStatus.UNHEALTHY,
                type=db_type,
                error=str(e),
            )

    async def check_driver(self) -> DriverHealth:
        binary = self._config.helm.binary

        try:
            available = await self._driver.available()
        except Exception as e:
            logger.warning(f"Driver health check failed: {e}")
            return DriverHealth(status=ServiceStatus.UNHEALTHY, binary=binary, error=str(e))

        if not available:
            return DriverHealth(
                status=ServiceStatus.UNHEALTHY,
                binary=binary,
                error=f"{binary} is not available",
            )
        return DriverHealth(status=ServiceStatus.HEALTHY, binary=binary)

    def _get_database_type(self) -> str:
        """Determine database type from connection URL."""
        if "postgresql" in self._config.database.url:
            return "postgresql"
        elif "sqlite" in self._config.database.url:
            return "sqlite"
        else:
            return "unknown"
