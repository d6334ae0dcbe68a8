"""Unit tests for health check API endpoints.

These tests verify the health router behavior with mocked dependencies.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from store_provisioner.app.api.http.deps import get_health_service
from store_provisioner.app.api.http.routers.health import router
from store_provisioner.app.api.http.schemas.health import (
    AllServicesHealth,
    DatabaseHealth,
    DriverHealth,
    OverallStatus,
    ReadinessResponse,
    ServiceStatus,
)
from store_provisioner.app.core.services.health_service import HealthCheckService


def _readiness(
    database: ServiceStatus = ServiceStatus.HEALTHY,
    driver: ServiceStatus = ServiceStatus.HEALTHY,
) -> ReadinessResponse:
    ready = database == ServiceStatus.HEALTHY and driver == ServiceStatus.HEALTHY
    return ReadinessResponse(
        status=OverallStatus.READY if ready else OverallStatus.NOT_READY,
        environment="development",
        checks=AllServicesHealth(
            database=DatabaseHealth(status=database, type="sqlite"),
            driver=DriverHealth(
                status=driver,
                binary="helm",
                error=None if driver == ServiceStatus.HEALTHY else "helm is not available",
            ),
        ),
    )


@pytest.fixture
def mock_app_deps() -> MagicMock:
    """Create mock application dependencies."""
    deps = MagicMock()
    deps.database_service.get_pool_status.return_value = {"size": 5, "checked_out": 1}
    return deps


@pytest.fixture
def mock_health_service() -> MagicMock:
    """Create a mock health check service."""
    service = MagicMock(spec=HealthCheckService)
    service.check_all = AsyncMock(return_value=_readiness())
    service.check_database = AsyncMock(
        return_value=DatabaseHealth(status=ServiceStatus.HEALTHY, type="sqlite")
    )
    return service


@pytest.fixture
def client(mock_app_deps: MagicMock, mock_health_service: MagicMock) -> TestClient:
    """Create a test client with the health router and mocked dependencies."""
    app = FastAPI()
    app.include_router(router)
    app.state.app_dependencies = mock_app_deps
    app.dependency_overrides[get_health_service] = lambda: mock_health_service
    return TestClient(app)


class TestLivenessEndpoint:
    """Tests for GET /health."""

    def test_liveness_returns_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "store-provisioner"}


class TestReadinessEndpoint:
    """Tests for GET /health/ready."""

    def test_ready_returns_200(self, client: TestClient) -> None:
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["driver"]["binary"] == "helm"

    def test_driver_unavailable_returns_503(
        self, client: TestClient, mock_health_service: MagicMock
    ) -> None:
        mock_health_service.check_all = AsyncMock(
            return_value=_readiness(driver=ServiceStatus.UNHEALTHY)
        )

        response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["driver"]["error"] == "helm is not available"

    def test_database_down_returns_503(
        self, client: TestClient, mock_health_service: MagicMock
    ) -> None:
        mock_health_service.check_all = AsyncMock(
            return_value=_readiness(database=ServiceStatus.UNHEALTHY)
        )

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["driver"]["status"] == "healthy"


class TestDatabaseEndpoint:
    """Tests for GET /health/database."""

    def test_healthy_database_includes_pool(self, client: TestClient) -> None:
        response = client.get("/health/database")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["pool"] == {"size": 5, "checked_out": 1}

    def test_unhealthy_database_returns_503(
        self, client: TestClient, mock_health_service: MagicMock
    ) -> None:
        mock_health_service.check_database = AsyncMock(
            return_value=DatabaseHealth(
                status=ServiceStatus.UNHEALTHY, type="sqlite", error="locked"
            )
        )

        response = client.get("/health/database")

        assert response.status_code == 503
        assert response.json()["error"] == "locked"

    def test_pool_status_error_returns_503(
        self, client: TestClient, mock_app_deps: MagicMock
    ) -> None:
        mock_app_deps.database_service.get_pool_status.side_effect = RuntimeError(
            "pool closed"
        )

        response = client.get("/health/database")

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "pool closed"
        assert data["error_type"] == "RuntimeError"
