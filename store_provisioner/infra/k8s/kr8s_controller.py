"""Kr8s-based implementation of KubernetesController."""

from __future__ import annotations

import asyncio
from typing import Any

import kr8s
from kr8s.asyncio.objects import Deployment, Namespace

from .controller import CommandResult, KubernetesController

NAMESPACE_POLL_SECONDS = 1.0


class Kr8sController(KubernetesController):
    """Kubernetes controller backed by the async kr8s client.

    The API client is created per call: it binds to the event loop that is
    running at creation time, and CLI commands get a fresh loop from
    run_sync() each time.
    """

    async def _get_api(self) -> Any:
        return await kr8s.asyncio.api()

    async def _get_namespace(self, namespace: str) -> Any | None:
        api = await self._get_api()
        try:
            return await Namespace.get(namespace, api=api)
        except kr8s.NotFoundError:
            return None

    async def create_namespace(
        self,
        namespace: str,
        *,
        labels: dict[str, str] | None = None,
    ) -> CommandResult:
        try:
            if await self._get_namespace(namespace) is not None:
                return CommandResult(
                    success=True, stdout=f'namespace "{namespace}" already exists'
                )
            api = await self._get_api()
            manifest = {
                "apiVersion": "v1",
                "kind": "Namespace",
                "metadata": {"name": namespace, "labels": labels or {}},
            }
            await Namespace(manifest, api=api).create()
        except Exception as e:
            return CommandResult(success=False, stderr=str(e), returncode=1)
        return CommandResult(success=True, stdout=f'namespace "{namespace}" created')

    async def delete_namespace(
        self,
        namespace: str,
        *,
        wait: bool = True,
        timeout_seconds: float = 120,
        ignore_not_found: bool = False,
    ) -> CommandResult:
        try:
            ns = await self._get_namespace(namespace)
            if ns is None:
                message = f'namespace "{namespace}" not found'
                if ignore_not_found:
                    return CommandResult(success=True, stdout=message)
                return CommandResult(success=False, stderr=message, returncode=1)

            await ns.delete()
            if wait:
                await asyncio.wait_for(
                    self._namespace_gone(namespace), timeout=timeout_seconds
                )
        except TimeoutError:
            return CommandResult(
                success=False,
                stderr=f"Timed out after {timeout_seconds:g}s waiting for "
                f"namespace {namespace} to terminate",
                returncode=1,
            )
        except Exception as e:
            return CommandResult(success=False, stderr=str(e), returncode=1)
        return CommandResult(success=True, stdout=f'namespace "{namespace}" deleted')

    async def _namespace_gone(self, namespace: str) -> None:
        # Namespaces linger in Terminating until their finalizers run.
        while await self._get_namespace(namespace) is not None:
            await asyncio.sleep(NAMESPACE_POLL_SECONDS)

    async def get_deployment_ready_replicas(self, name: str, namespace: str) -> int:
        api = await self._get_api()
        deployment = await Deployment.get(name, namespace=namespace, api=api)
        ready: int | None = deployment.raw.get("status", {}).get("readyReplicas")
        return ready or 0
