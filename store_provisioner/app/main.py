"""FastAPI application factory for the store provisioning API.

Endpoints:
- REST: /api/v1/stores/*
- Health: /health, /health/ready, /health/database
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from store_provisioner.app.api.http.app_data import (
    ApplicationDependencies,
    build_application_dependencies,
)
from store_provisioner.app.api.http.errors import setup_error_handlers
from store_provisioner.app.api.http.routers import health, stores
from store_provisioner.app.core.provisioning import reconcile_stale_jobs
from store_provisioner.app.core.services import DbManageService
from store_provisioner.app.runtime.config.config_data import ConfigData
from store_provisioner.app.runtime.context import get_config
from store_provisioner.app.runtime.logging_setup import configure_logging

API_PREFIX = "/api/v1"

DependenciesFactory = Callable[[ConfigData], ApplicationDependencies]


def create_app(
    config: ConfigData | None = None,
    dependencies_factory: DependenciesFactory = build_application_dependencies,
) -> FastAPI:
    """Build the application.

    Args:
        config: Configuration to use; loaded from config.yaml when omitted
        dependencies_factory: Builds the service graph during startup
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(config.logging)
        logger.info(f"Starting store provisioner ({config.app.environment})")

        deps = dependencies_factory(config)
        DbManageService(deps.database_service).create_all()
        reconcile_stale_jobs(
            deps.lifecycle_store, config.provisioning.stale_job_threshold_seconds
        )
        app.state.app_dependencies = deps
        logger.info("Store provisioner ready")

        try:
            yield
        finally:
            logger.info("Shutting down store provisioner")
            await deps.supervisor.drain(config.provisioning.shutdown_grace_seconds)
            deps.database_service.dispose()
            logger.info("Store provisioner stopped")

    app = FastAPI(
        title="Store Provisioner",
        description="Provisions and tears down e-commerce stores on Kubernetes",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors_origins,
        allow_credentials="*" not in config.app.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handlers(app)

    app.include_router(health.router)
    app.include_router(stores.router, prefix=API_PREFIX)
    return app
