"""Data types for shell command results.

`CommandResult` is re-exported from store_provisioner.infra.k8s.controller,
which is its canonical location shared by the Kubernetes controllers.
"""

from __future__ import annotations

from dataclasses import dataclass

from store_provisioner.infra.k8s.controller import CommandResult

__all__ = [
    "CommandResult",
    "HelmRelease",
]


@dataclass
class HelmRelease:
    """Information about a Helm release.

    Attributes:
        name: Release name
        namespace: Kubernetes namespace
        status: Release status (deployed, failed, pending-install, uninstalling)
        revision: Release revision number
    """

    name: str
    namespace: str
    status: str
    revision: str
