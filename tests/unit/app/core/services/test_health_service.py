"""Unit tests for the HealthCheckService.

These tests verify the health check service logic with mocked dependencies.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from store_provisioner.app.api.http.schemas.health import (
    OverallStatus,
    ServiceStatus,
)
from store_provisioner.app.core.services.health_service import HealthCheckService


@pytest.fixture
def mock_config() -> MagicMock:
    """Create a mock configuration."""
    config = MagicMock()
    config.app.environment = "development"
    config.database.url = "postgresql://localhost:5432/test"
    config.helm.binary = "helm"
    return config


@pytest.fixture
def mock_repository() -> MagicMock:
    repository = MagicMock()
    repository.health_check.return_value = True
    return repository


@pytest.fixture
def mock_driver() -> MagicMock:
    driver = MagicMock()
    driver.available = AsyncMock(return_value=True)
    return driver


@pytest.fixture
def health_service(
    mock_repository: MagicMock, mock_driver: MagicMock, mock_config: MagicMock
) -> HealthCheckService:
    """Create a HealthCheckService instance with mocked dependencies."""
    return HealthCheckService(mock_repository, mock_driver, mock_config)


class TestCheckAll:
    """Tests for the check_all method."""

    async def test_all_services_healthy(
        self, health_service: HealthCheckService
    ) -> None:
        """Test check_all returns READY when all services are healthy."""
        result = await health_service.check_all()

        assert result.status == OverallStatus.READY
        assert result.environment == "development"
        assert result.checks.database.status == ServiceStatus.HEALTHY
        assert result.checks.driver.status == ServiceStatus.HEALTHY

    async def test_database_failure_makes_not_ready(
        self, health_service: HealthCheckService, mock_repository: MagicMock
    ) -> None:
        """Test check_all returns NOT_READY when database fails."""
        mock_repository.health_check.return_value = False

        result = await health_service.check_all()

        assert result.status == OverallStatus.NOT_READY
        assert result.checks.database.status == ServiceStatus.UNHEALTHY
        assert result.checks.driver.status == ServiceStatus.HEALTHY

    async def test_driver_failure_makes_not_ready(
        self, health_service: HealthCheckService, mock_driver: MagicMock
    ) -> None:
        """Test check_all returns NOT_READY when helm is unavailable."""
        mock_driver.available = AsyncMock(return_value=False)

        result = await health_service.check_all()

        assert result.status == OverallStatus.NOT_READY
        assert result.checks.driver.status == ServiceStatus.UNHEALTHY
        assert result.checks.driver.error == "helm is not available"


class TestCheckDatabase:
    """Tests for the check_database method."""

    async def test_healthy_database(self, health_service: HealthCheckService) -> None:
        result = await health_service.check_database()

        assert result.status == ServiceStatus.HEALTHY
        assert result.type == "postgresql"
        assert result.error is None

    async def test_database_exception(
        self, health_service: HealthCheckService, mock_repository: MagicMock
    ) -> None:
        """Test exceptions are reported, not raised."""
        mock_repository.health_check.side_effect = Exception("Connection refused")

        result = await health_service.check_database()

        assert result.status == ServiceStatus.UNHEALTHY
        assert result.error == "Connection refused"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgresql://localhost:5432/test", "postgresql"),
            ("sqlite:///./test.db", "sqlite"),
            ("mysql://localhost/test", "unknown"),
        ],
    )
    async def test_database_type_detection(
        self,
        mock_repository: MagicMock,
        mock_driver: MagicMock,
        mock_config: MagicMock,
        url: str,
        expected: str,
    ) -> None:
        mock_config.database.url = url
        service = HealthCheckService(mock_repository, mock_driver, mock_config)

        result = await service.check_database()

        assert result.type == expected


class TestCheckDriver:
    """Tests for the check_driver method."""

    async def test_driver_exception(
        self, health_service: HealthCheckService, mock_driver: MagicMock
    ) -> None:
        mock_driver.available = AsyncMock(side_effect=OSError("exec format error"))

        result = await health_service.check_driver()

        assert result.status == ServiceStatus.UNHEALTHY
        assert result.binary == "helm"
        assert result.error == "exec format error"
