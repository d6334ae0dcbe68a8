"""Kubernetes operations used by the Helm driver and the readiness prober.

The backend sits behind an abstract class so tests can substitute a double
for the kr8s implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class CommandResult:
    """Outcome of a cluster or shell operation."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def message(self) -> str:
        """Best available diagnostic text, preferring stderr."""
        return (self.stderr or self.stdout).strip()


class KubernetesController(ABC):
    """Async Kubernetes operations scoped to store namespaces.

    Example:
        from store_provisioner.infra.k8s import get_k8s_controller, run_sync

        controller = get_k8s_controller()
        ready = run_sync(
            controller.get_deployment_ready_replicas(
                "store-shop-wordpress", "store-abc123"
            )
        )
    """

    @abstractmethod
    async def create_namespace(
        self,
        namespace: str,
        *,
        labels: dict[str, str] | None = None,
    ) -> CommandResult:
        """Create a namespace. An already existing namespace is a success."""
        ...

    @abstractmethod
    async def delete_namespace(
        self,
        namespace: str,
        *,
        wait: bool = True,
        timeout_seconds: float = 120,
        ignore_not_found: bool = False,
    ) -> CommandResult:
        """Delete a namespace together with everything in it.

        Args:
            namespace: Namespace to delete
            wait: Block until the namespace has finished terminating
            timeout_seconds: Upper bound on the wait
            ignore_not_found: Report a missing namespace as success
        """
        ...

    @abstractmethod
    async def get_deployment_ready_replicas(self, name: str, namespace: str) -> int:
        """Return `status.readyReplicas` of a deployment, 0 when unset.

        Backend errors propagate, including the deployment not existing yet.
        """
        ...
