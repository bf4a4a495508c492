"""Tests for query submission and the conversation history."""

from __future__ import annotations

import asyncio
import unittest

from rustcoder_tui.controllers import QUERY_FAILED_TEXT, ConversationController
from rustcoder_tui.exceptions import BackendConnectionError
from rustcoder_tui.state import QueryBufferEdited, Sender, SessionStore


class _FakeQueryBackend:
    def __init__(
        self,
        answer: str = "",
        failure: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.answer = answer
        self.failure = failure
        self.gate = gate
        self.queries: list[str] = []

    async def query(self, query: str) -> str:
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        if self.failure is not None:
            raise self.failure
        return self.answer


class ConversationControllerTests(unittest.IsolatedAsyncioTestCase):
    """Validate turn ordering, error replies and the in-flight guard."""

    async def test_turn_appends_user_then_code_answer(self) -> None:
        store = SessionStore()
        backend = _FakeQueryBackend(
            answer='Here you go:\n---\nfn main() {\n    println!("Hello, world!");\n}'
        )
        controller = ConversationController(store, backend)  # type: ignore[arg-type]
        store.dispatch(QueryBufferEdited("hello world"))

        reply = await controller.submit_query()

        user, assistant = controller.messages
        self.assertIs(user.sender, Sender.USER)
        self.assertEqual(user.text, "hello world")
        self.assertIsNone(user.original_query)
        self.assertIs(assistant, reply)
        self.assertIs(assistant.sender, Sender.ASSISTANT)
        self.assertEqual(
            assistant.text, 'fn main() {\n    println!("Hello, world!");\n}'
        )
        self.assertEqual(assistant.original_query, "hello world")
        self.assertLess(user.id, assistant.id)
        self.assertFalse(controller.query_in_flight)
        self.assertEqual(store.state.query_buffer, "")
        self.assertEqual(backend.queries, ["hello world"])

    async def test_failure_appends_apology_without_feedback(self) -> None:
        store = SessionStore()
        backend = _FakeQueryBackend(failure=BackendConnectionError("down"))
        controller = ConversationController(store, backend)  # type: ignore[arg-type]

        reply = await controller.submit_query("write a parser")

        assert reply is not None
        self.assertEqual(reply.text, QUERY_FAILED_TEXT)
        self.assertIsNone(reply.original_query)
        self.assertFalse(reply.can_receive_feedback)
        self.assertEqual(len(controller.messages), 2)
        self.assertFalse(controller.query_in_flight)

    async def test_second_query_is_ignored_while_first_is_pending(self) -> None:
        store = SessionStore()
        gate = asyncio.Event()
        backend = _FakeQueryBackend(answer="---\nfn a() {}", gate=gate)
        controller = ConversationController(store, backend)  # type: ignore[arg-type]

        first = asyncio.create_task(controller.submit_query("first"))
        await asyncio.sleep(0)
        self.assertTrue(controller.query_in_flight)

        second = await controller.submit_query("second")

        self.assertIsNone(second)
        self.assertEqual(backend.queries, ["first"])
        self.assertEqual(len(controller.messages), 1)

        gate.set()
        await first
        self.assertEqual(len(controller.messages), 2)
        self.assertFalse(controller.query_in_flight)

    async def test_blank_query_is_noop(self) -> None:
        store = SessionStore()
        backend = _FakeQueryBackend(answer="unused")
        controller = ConversationController(store, backend)  # type: ignore[arg-type]

        self.assertIsNone(await controller.submit_query("   "))
        self.assertEqual(controller.messages, ())
        self.assertEqual(backend.queries, [])

    async def test_cancellation_still_clears_in_flight_flag(self) -> None:
        store = SessionStore()
        backend = _FakeQueryBackend(answer="x", gate=asyncio.Event())
        controller = ConversationController(store, backend)  # type: ignore[arg-type]

        task = asyncio.create_task(controller.submit_query("slow"))
        await asyncio.sleep(0)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertFalse(controller.query_in_flight)
        self.assertEqual(len(controller.messages), 1)


if __name__ == "__main__":
    unittest.main()
