"""Deployment readiness polling."""

from __future__ import annotations

import asyncio

from loguru import logger

from store_provisioner.app.core.errors import ReadinessTimeoutError
from store_provisioner.infra.k8s.controller import KubernetesController


class ReadinessProber:
    """Polls a deployment until it has at least one ready replica.

    A failed poll (deployment not created yet, API hiccup) only means
    "not ready yet". Only running out of attempts is an error.
    """

    def __init__(self, controller: KubernetesController) -> None:
        self._controller = controller

    async def wait_ready(
        self,
        namespace: str,
        name: str,
        *,
        max_attempts: int = 60,
        interval: float = 5.0,
    ) -> None:
        """Wait for deployment `name` in `namespace` to report ready.

        Args:
            namespace: Kubernetes namespace of the deployment
            name: Deployment name
            max_attempts: Number of polls before giving up
            interval: Seconds to sleep between polls

        Raises:
            ReadinessTimeoutError: If no poll observed a ready replica
        """
        for attempt in range(1, max_attempts + 1):
            try:
                ready = await self._controller.get_deployment_ready_replicas(
                    name, namespace
                )
            except Exception as e:
                logger.debug(
                    f"Readiness poll {attempt}/{max_attempts} for {namespace}/{name} failed: {e}"
                )
                ready = 0

            if ready >= 1:
                logger.info(f"Deployment {namespace}/{name} is ready")
                return

            if attempt < max_attempts:
                await asyncio.sleep(interval)

        raise ReadinessTimeoutError(
            f"Timeout waiting for store to be ready: deployment {name} in "
            f"{namespace} had no ready replicas after {max_attempts} attempts"
        )
