"""Helm-backed infrastructure driver."""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from store_provisioner.infra.driver.base import InfrastructureDriver
from store_provisioner.infra.k8s.controller import KubernetesController
from store_provisioner.infra.shell.helm import HelmCommands
from store_provisioner.infra.shell.types import CommandResult, HelmRelease

RELEASE_NOT_FOUND_MARKER = "release: not found"

MANAGED_BY_LABELS = {"app.kubernetes.io/managed-by": "store-provisioner"}


class HelmDriver(InfrastructureDriver):
    """Installs store charts with `helm upgrade --install`.

    Helm is a blocking subprocess, so every call runs in a worker thread
    to keep the event loop free for other stores.
    """

    def __init__(
        self,
        helm: HelmCommands,
        controller: KubernetesController,
        chart_path: Path,
        *,
        timeout_seconds: int = 600,
    ) -> None:
        self._helm = helm
        self._controller = controller
        self._chart_path = chart_path
        self._timeout_seconds = timeout_seconds

    async def install(
        self,
        release_name: str,
        namespace: str,
        values: dict[str, Any],
    ) -> CommandResult:
        logger.info(f"Installing Helm release {release_name} in {namespace}")

        ns_result = await self._controller.create_namespace(
            namespace, labels=MANAGED_BY_LABELS
        )
        if not ns_result.success:
            logger.error(f"Failed to create namespace {namespace}: {ns_result.message}")
            return ns_result

        values_file = _write_values_file(values)
        try:
            result = await asyncio.to_thread(
                self._helm.upgrade_install,
                release_name,
                self._chart_path,
                namespace,
                value_files=[values_file],
                timeout_seconds=self._timeout_seconds,
            )
        finally:
            values_file.unlink(missing_ok=True)

        if result.success:
            logger.info(f"Helm install completed for {release_name}")
        else:
            logger.error(f"Helm install failed for {release_name}: {result.message}")
        return result

    async def uninstall(self, release_name: str, namespace: str) -> CommandResult:
        logger.info(f"Uninstalling Helm release {release_name} from {namespace}")
        result = await asyncio.to_thread(self._helm.uninstall, release_name, namespace)

        if not result.success and RELEASE_NOT_FOUND_MARKER in result.message:
            logger.warning(f"Helm release {release_name} not found during uninstall")
            return CommandResult(success=True, stdout=result.message)

        if not result.success:
            logger.error(f"Helm uninstall failed for {release_name}: {result.message}")
        return result

    async def status(self, release_name: str, namespace: str) -> HelmRelease | None:
        return await asyncio.to_thread(self._helm.status, release_name, namespace)

    async def delete_namespace(self, namespace: str) -> CommandResult:
        logger.info(f"Deleting namespace {namespace}")
        return await self._controller.delete_namespace(
            namespace, wait=False, ignore_not_found=True
        )

    async def available(self) -> bool:
        result = await asyncio.to_thread(self._helm.version)
        return result.success


def _write_values_file(values: dict[str, Any]) -> Path:
    """Dump a values payload to a temporary YAML file for `--values`."""
    fd, path = tempfile.mkstemp(prefix="helm-values-", suffix=".yaml")
    with os.fdopen(fd, "w") as f:
        yaml.safe_dump(values, f, default_flow_style=False, sort_keys=False)
    return Path(path)
