"""Kubernetes infrastructure abstraction layer.

Example:
    from store_provisioner.infra.k8s import get_k8s_controller, run_sync

    controller = get_k8s_controller()
    ready = run_sync(controller.get_deployment_ready_replicas("web", "store-1"))
"""

from .controller import CommandResult, KubernetesController
from .helpers import get_k8s_controller
from .prober import ReadinessProber
from .utils import run_sync

__all__ = [
    "KubernetesController",
    "CommandResult",
    "ReadinessProber",
    "get_k8s_controller",
    "run_sync",
]
