"""Validated configuration model loaded from config.yaml."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class AppConfig(BaseModel):
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = (
        "INFO"
    )
    json_output: bool = Field(
        default=False, description="Serialize log records as JSON lines"
    )

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///./store_provisioner.db"
    echo: bool = False
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)


class HelmConfig(BaseModel):
    binary: str = "helm"
    chart_path: Path = Path("/charts/helm/store-engine/woocommerce")
    timeout_seconds: int = Field(default=600, ge=1)


class ProvisioningConfig(BaseModel):
    base_domain: str = "127.0.0.1.nip.io"
    max_concurrent: int = Field(
        default=5, ge=1, description="Lifecycle tasks allowed to run at once"
    )
    readiness_max_attempts: int = Field(default=60, ge=1)
    readiness_interval_seconds: float = Field(default=5.0, ge=0)
    stale_job_threshold_seconds: int = Field(
        default=900,
        ge=0,
        description="Active jobs untouched for longer are failed on startup",
    )
    shutdown_grace_seconds: float = Field(default=30.0, ge=0)
    storage_class: str = "standard"
    cert_issuer: str = "selfsigned"
    admin_email: str = "admin@example.com"


class ConfigData(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    helm: HelmConfig = Field(default_factory=HelmConfig)
    provisioning: ProvisioningConfig = Field(default_factory=ProvisioningConfig)
