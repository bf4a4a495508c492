"""Tests for background task tracking."""

from __future__ import annotations

import asyncio
import unittest

from rustcoder_tui.task_manager import TaskManager


class TaskManagerTests(unittest.IsolatedAsyncioTestCase):
    """Validate spawn, lookup, cancellation and failure reporting."""

    async def test_named_task_is_retrievable(self) -> None:
        manager = TaskManager()
        task = manager.spawn(asyncio.sleep(10), name="monitor")
        self.assertIs(manager.get("monitor"), task)
        self.assertIsNone(manager.get("missing"))
        self.assertEqual(manager.pending_count, 1)
        await manager.cancel_all()
        self.assertTrue(task.cancelled())
        self.assertEqual(manager.pending_count, 0)

    async def test_await_anonymous_waits_for_nested_spawns(self) -> None:
        manager = TaskManager()
        finished: list[str] = []

        async def _inner() -> None:
            await asyncio.sleep(0)
            finished.append("inner")

        async def _outer() -> None:
            manager.spawn(_inner())
            finished.append("outer")

        manager.spawn(_outer())
        await manager.await_anonymous()

        self.assertEqual(finished, ["outer", "inner"])
        self.assertEqual(manager.pending_count, 0)

    async def test_failed_task_is_logged(self) -> None:
        manager = TaskManager()

        async def _boom() -> None:
            raise RuntimeError("boom")

        with self.assertLogs("rustcoder_tui.task_manager", level="ERROR") as logs:
            manager.spawn(_boom())
            await manager.await_anonymous()
            await asyncio.sleep(0)

        self.assertTrue(any("task.failed" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
