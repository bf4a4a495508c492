"""Lifecycle tracking for fire-and-forget asyncio tasks started by the UI."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


class TaskManager:
    """Keep references to background tasks until they finish.

    Controllers settle their own state, so a task that raises is only
    logged here. Named tasks are reserved for long-running loops such as
    the connection monitor.
    """

    def __init__(self) -> None:
        self._named: dict[str, asyncio.Task[Any]] = {}
        self._anonymous: set[asyncio.Task[Any]] = set()

    def spawn(
        self, coro: Coroutine[Any, Any, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """Schedule ``coro`` on the running loop and track the task."""
        task = asyncio.create_task(coro)
        task.add_done_callback(self._log_failure)
        if name is not None:
            self._named[name] = task
        else:
            self._anonymous.add(task)
            task.add_done_callback(self._anonymous.discard)
        return task

    def get(self, name: str) -> asyncio.Task[Any] | None:
        """Look up a task spawned with ``name``."""
        return self._named.get(name)

    @property
    def pending_count(self) -> int:
        tasks = list(self._named.values()) + list(self._anonymous)
        return sum(1 for task in tasks if not task.done())

    @staticmethod
    def _log_failure(task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error(
                "task.failed",
                exc_info=exc,
                extra={"event": "task.failed", "task": task.get_name()},
            )

    async def cancel_all(self) -> None:
        """Cancel every tracked task and wait for them to unwind."""
        all_tasks = [
            t for t in list(self._named.values()) + list(self._anonymous) if not t.done()
        ]
        for task in all_tasks:
            task.cancel()
        for task in all_tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:  # noqa: BLE001 - already reported by _log_failure.
                pass
        self._named.clear()
        self._anonymous.clear()

    async def await_anonymous(self) -> None:
        """Wait for all one-shot tasks, including ones spawned meanwhile."""
        while True:
            pending = [t for t in self._anonymous if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
