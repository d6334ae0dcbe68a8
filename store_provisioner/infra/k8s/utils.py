"""Utility functions for the Kubernetes infrastructure layer."""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Coroutine
from typing import Any


def run_sync[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine from synchronous code (CLI commands).

    If an event loop is already running in this thread, the coroutine is
    executed on a fresh loop in a worker thread instead.

    Example:
        from store_provisioner.infra.k8s import get_k8s_controller, run_sync

        controller = get_k8s_controller()
        ready = run_sync(controller.get_deployment_ready_replicas("web", "store-1"))
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
