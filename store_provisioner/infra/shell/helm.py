"""Helm command abstractions.

This module provides commands for Helm release management used by the
store driver: install/upgrade, uninstall, status and version queries.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult, HelmRelease

if TYPE_CHECKING:
    from .runner import CommandRunner

# Grace period added to the subprocess timeout on top of Helm's own --timeout,
# so Helm gets the chance to roll back before the process is killed.
PROCESS_TIMEOUT_BUFFER_SECONDS = 30


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Release management (upgrade --install, uninstall)
    - Status queries (release status, tool version)
    """

    def __init__(self, runner: CommandRunner, binary: str = "helm") -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
            binary: Helm executable name or path
        """
        self._runner = runner
        self._binary = binary

    # =========================================================================
    # Release Management
    # =========================================================================

    def upgrade_install(
        self,
        release_name: str,
        chart_path: Path,
        namespace: str,
        *,
        value_files: list[Path] | None = None,
        timeout_seconds: int = 600,
        wait: bool = True,
        atomic: bool = True,
        create_namespace: bool = True,
    ) -> CommandResult:
        """Deploy or upgrade a Helm release.

        Uses `helm upgrade --install` to idempotently deploy a chart.
        If the release doesn't exist, it will be installed. If it exists,
        it will be upgraded.

        Args:
            release_name: Name for the Helm release (e.g., "store-<id>")
            chart_path: Path to the Helm chart directory
            namespace: Kubernetes namespace for deployment
            value_files: Optional list of values.yaml override files
            timeout_seconds: Maximum time Helm waits for the deployment
            wait: Whether to wait for resources to be ready
            atomic: Whether to roll back automatically if the install fails
            create_namespace: Whether to create namespace if it doesn't exist

        Returns:
            CommandResult with deployment status

        Example:
            >>> helm.upgrade_install(
            ...     "store-42",
            ...     Path("/charts/store-engine/woocommerce"),
            ...     "store-42",
            ...     value_files=[Path("/tmp/values.yaml")],
            ... )
        """
        cmd = [
            self._binary,
            "upgrade",
            "--install",
            release_name,
            str(chart_path),
            "--namespace",
            namespace,
        ]

        if create_namespace:
            cmd.append("--create-namespace")
        if wait:
            cmd.append("--wait")
        if atomic:
            cmd.append("--atomic")
        cmd.extend(["--timeout", f"{timeout_seconds}s"])

        for vf in value_files or []:
            cmd.extend(["--values", str(vf)])

        return self._runner.run(
            cmd, timeout=timeout_seconds + PROCESS_TIMEOUT_BUFFER_SECONDS
        )

    def uninstall(
        self,
        release_name: str,
        namespace: str,
        *,
        wait: bool = True,
        timeout_seconds: int = 120,
    ) -> CommandResult:
        """Uninstall a Helm release.

        Args:
            release_name: Name of the release to uninstall
            namespace: Kubernetes namespace
            wait: Whether to wait for resources to be deleted
            timeout_seconds: Maximum time to wait for the uninstall

        Returns:
            CommandResult with uninstall status
        """
        cmd = [self._binary, "uninstall", release_name, "--namespace", namespace]
        if wait:
            cmd.append("--wait")
        cmd.extend(["--timeout", f"{timeout_seconds}s"])
        return self._runner.run(
            cmd, timeout=timeout_seconds + PROCESS_TIMEOUT_BUFFER_SECONDS
        )

    # =========================================================================
    # Status Queries
    # =========================================================================

    def status(self, release_name: str, namespace: str) -> HelmRelease | None:
        """Get the status of a single release.

        Args:
            release_name: Name of the release
            namespace: Kubernetes namespace

        Returns:
            HelmRelease, or None if the release does not exist or the
            output could not be parsed
        """
        cmd = [
            self._binary,
            "status",
            release_name,
            "--namespace",
            namespace,
            "--output",
            "json",
        ]

        result = self._runner.run(cmd, timeout=30)
        if not result.success or not result.stdout:
            return None

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError:
            return None

        return HelmRelease(
            name=data.get("name", release_name),
            namespace=data.get("namespace", namespace),
            status=data.get("info", {}).get("status", ""),
            revision=str(data.get("version", "")),
        )

    def version(self, *, timeout_seconds: int = 5) -> CommandResult:
        """Run `helm version --short`, a cheap liveness check of the tool."""
        return self._runner.run(
            [self._binary, "version", "--short"], timeout=timeout_seconds
        )
