from __future__ import annotations

from cachetools.func import lru_cache  # type: ignore

from store_provisioner.infra.k8s.controller import KubernetesController


@lru_cache(maxsize=1)
def get_k8s_controller() -> KubernetesController:
    """Get the process-wide KubernetesController (kr8s backed)."""
    from store_provisioner.infra.k8s.kr8s_controller import Kr8sController

    return Kr8sController()
