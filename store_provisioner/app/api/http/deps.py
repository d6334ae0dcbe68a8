"""FastAPI dependencies resolving services from `app.state`."""

from fastapi import Request

from store_provisioner.app.api.http.app_data import ApplicationDependencies
from store_provisioner.app.core.provisioning import StoreOrchestrator
from store_provisioner.app.core.services.health_service import HealthCheckService


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_orchestrator(request: Request) -> StoreOrchestrator:
    return get_app_dependencies(request).orchestrator


def get_health_service(request: Request) -> HealthCheckService:
    deps = get_app_dependencies(request)
    return HealthCheckService(deps.lifecycle_store, deps.driver, deps.config)


def get_actor(request: Request) -> str | None:
    """Identity of the caller as forwarded by the authenticating proxy."""
    return request.headers.get("X-User-Id")
