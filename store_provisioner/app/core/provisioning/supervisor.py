"""Supervised execution of detached lifecycle tasks."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from store_provisioner.app.entities.columns import utcnow


class SupervisorClosedError(RuntimeError):
    """Raised by `submit` once `drain()` has started."""


@dataclass(frozen=True)
class TaskOutcome:
    """How the last task for a key ended.

    `completed` is about the task itself: the work returned without raising.
    A provisioning run that recorded a `failed` store still completed.
    """

    key: str
    name: str
    completed: bool
    error: str | None
    finished_at: datetime


class TaskSupervisor:
    """Owns every detached provisioning/deprovisioning task.

    - At most `max_concurrent` tasks run their body at once; extra tasks are
      queued on a semaphore rather than rejected.
    - At most one task per key (store id) is active, queued or running.
    - Every task's outcome is captured and logged. Nothing is fire-and-forget.
    - `drain()` waits for in-flight work on shutdown and cancels what is
      left after the grace period. Queued tasks cancelled before they got a
      slot run their `on_abandoned` callback instead of their work.
    """

    def __init__(self, max_concurrent: int) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._outcomes: dict[str, TaskOutcome] = {}
        self._running = 0
        self._closed = False

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def active_count(self) -> int:
        """Tasks submitted and not finished yet (queued or running)."""
        return len(self._tasks)

    @property
    def running_count(self) -> int:
        """Tasks currently holding an execution slot."""
        return self._running

    @property
    def accepting(self) -> bool:
        return not self._closed

    def is_active(self, key: str) -> bool:
        return key in self._tasks

    def last_outcome(self, key: str) -> TaskOutcome | None:
        return self._outcomes.get(key)

    def submit(
        self,
        key: str,
        name: str,
        work: Callable[[], Awaitable[None]],
        on_abandoned: Callable[[], Awaitable[None]] | None = None,
    ) -> asyncio.Task[None]:
        """Schedule `work` as a detached task keyed by `key`.

        Args:
            key: Exclusivity key, normally the store id
            name: Human-readable task name for logs ("provision", "delete")
            work: Coroutine factory; called once a slot is free
            on_abandoned: Awaited instead of `work` when the task is
                cancelled while still waiting for a slot

        Raises:
            SupervisorClosedError: If the supervisor is draining
            RuntimeError: If a task for `key` is already active
        """
        if self._closed:
            raise SupervisorClosedError("Task supervisor is shutting down")
        if key in self._tasks:
            raise RuntimeError(f"A task is already active for {key}")

        task = asyncio.create_task(
            self._run(key, name, work, on_abandoned), name=f"{name}:{key}"
        )
        self._tasks[key] = task
        task.add_done_callback(lambda _: self._tasks.pop(key, None))
        logger.debug(
            f"Submitted {name} task for {key} ({self.active_count} active, "
            f"{self._running}/{self._max_concurrent} running)"
        )
        return task

    async def _run(
        self,
        key: str,
        name: str,
        work: Callable[[], Awaitable[None]],
        on_abandoned: Callable[[], Awaitable[None]] | None,
    ) -> None:
        try:
            await self._semaphore.acquire()
        except asyncio.CancelledError:
            self._record(key, name, error="cancelled before start")
            if on_abandoned is not None:
                try:
                    await on_abandoned()
                except Exception:
                    logger.exception(f"Could not record abandoned {name} task for {key}")
            raise

        self._running += 1
        try:
            await work()
        except asyncio.CancelledError:
            self._record(key, name, error="cancelled")
            raise
        except Exception as e:
            logger.exception(f"{name} task for {key} failed: {e}")
            self._record(key, name, error=str(e) or type(e).__name__)
        else:
            self._record(key, name, error=None)
        finally:
            self._running -= 1
            self._semaphore.release()

    def _record(self, key: str, name: str, *, error: str | None) -> None:
        self._outcomes[key] = TaskOutcome(
            key=key,
            name=name,
            completed=error is None,
            error=error,
            finished_at=utcnow(),
        )

    async def wait_idle(self) -> None:
        """Wait until no task is queued or running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def drain(self, timeout: float) -> None:
        """Stop accepting work, wait up to `timeout` seconds, then cancel."""
        self._closed = True
        pending = list(self._tasks.values())
        if not pending:
            return

        logger.info(f"Waiting up to {timeout}s for {len(pending)} lifecycle task(s)")
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning(f"Cancelling {len(still_running)} unfinished lifecycle task(s)")
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)
