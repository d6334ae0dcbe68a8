"""Infrastructure driver contract.

The orchestrator only ever talks to this interface. Whether a store's
resources are applied through the Helm CLI or a native client is an
implementation detail of the concrete driver.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from store_provisioner.infra.shell.types import CommandResult, HelmRelease


class InfrastructureDriver(ABC):
    """Executes install/uninstall/status operations for one store release.

    Drivers never retry. Failures are reported through `CommandResult`
    and the orchestrator decides what to do with them.
    """

    @abstractmethod
    async def install(
        self,
        release_name: str,
        namespace: str,
        values: dict[str, Any],
    ) -> CommandResult:
        """Idempotently create or upgrade a release.

        Must create `namespace` first when absent and bound the whole
        operation with a timeout.
        """
        ...

    @abstractmethod
    async def uninstall(self, release_name: str, namespace: str) -> CommandResult:
        """Remove a release. A release that does not exist is a success."""
        ...

    @abstractmethod
    async def status(self, release_name: str, namespace: str) -> HelmRelease | None:
        """Return the release status, or None if it does not exist."""
        ...

    @abstractmethod
    async def delete_namespace(self, namespace: str) -> CommandResult:
        """Delete the namespace of a store. A missing namespace is a success."""
        ...

    @abstractmethod
    async def available(self) -> bool:
        """Cheap liveness check of the underlying tool."""
        ...
