"""Runtime-style tests for the real Textual app class."""

from __future__ import annotations

import asyncio
from pathlib import Path
import tempfile
import unittest

from rustcoder_tui.config import DEFAULT_CONFIG
from rustcoder_tui.exceptions import BackendResponseError
from rustcoder_tui.state import ConnectionState, IngestionFlow, IngestionPhase

try:
    from textual.widgets import Button, Input, TextArea

    from rustcoder_tui.app import RustCoderApp
    from rustcoder_tui.widgets.message import MessageBubble
except ModuleNotFoundError:
    Button = Input = TextArea = None  # type: ignore[assignment,misc]
    RustCoderApp = None  # type: ignore[assignment,misc]
    MessageBubble = None  # type: ignore[assignment,misc]


class _RuntimeFakeBackend:
    def __init__(
        self,
        gate: asyncio.Event | None = None,
        text_gate: asyncio.Event | None = None,
    ) -> None:
        self.base_url = "http://127.0.0.1:3000"
        self.gate = gate
        self.text_gate = text_gate
        self.queries: list[str] = []
        self.texts: list[str] = []
        self.files: list[tuple[str, bytes]] = []
        self.votes: list[tuple[str, str, bool]] = []
        self.shutdown_calls = 0
        self.closed = False

    async def query(self, query: str) -> str:
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        return "Sure:\n---\nfn main() {}"

    async def ingest_text(self, content: str) -> None:
        self.texts.append(content)
        if self.text_gate is not None:
            await self.text_gate.wait()

    async def ingest_file(
        self, filename: str, data: bytes, content_type: str | None = None
    ) -> None:  # noqa: ARG002
        self.files.append((filename, data))

    async def submit_feedback(self, query: str, code: str, upvoted: bool) -> None:
        self.votes.append((query, code, upvoted))

    async def shutdown(self) -> None:
        self.shutdown_calls += 1
        raise BackendResponseError("already stopped", status_code=500)

    async def check_connection(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


@unittest.skipIf(RustCoderApp is None, "textual is not installed")
class AppRuntimeTests(unittest.IsolatedAsyncioTestCase):
    """Exercise the flows against the real app class."""

    def _build_app(self, backend: _RuntimeFakeBackend) -> RustCoderApp:
        assert RustCoderApp is not None
        config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}
        config["app"]["connection_check_interval_seconds"] = 999
        app = RustCoderApp(config=config, backend=backend)  # type: ignore[arg-type]
        app._copied_text = ""  # type: ignore[attr-defined]
        app.copy_to_clipboard = lambda value: setattr(app, "_copied_text", value)  # type: ignore[method-assign]
        return app

    async def _settle(self, app: RustCoderApp, pilot) -> None:
        await pilot.pause()
        await app._task_manager.await_anonymous()
        await pilot.pause()

    async def test_query_renders_user_and_code_bubbles(self) -> None:
        backend = _RuntimeFakeBackend()
        app = self._build_app(backend)
        async with app.run_test() as pilot:
            query_input = app.query_one("#query_input", Input)
            query_input.value = "hello world"
            await pilot.pause()

            await app.action_send_query()
            await self._settle(app, pilot)

            bubbles = list(app.query(MessageBubble))
            self.assertEqual(len(bubbles), 2)
            self.assertFalse(bubbles[0].shows_code)
            self.assertTrue(bubbles[1].shows_code)
            self.assertEqual(bubbles[1].chat_message.text, "fn main() {}")
            self.assertEqual(backend.queries, ["hello world"])
            self.assertEqual(query_input.value, "")
            self.assertIs(app.store.state.connection, ConnectionState.ONLINE)

            await app.action_copy_last_code()
            self.assertEqual(app._copied_text, "fn main() {}")  # type: ignore[attr-defined]

        self.assertTrue(backend.closed)

    async def test_query_row_locked_while_query_in_flight(self) -> None:
        gate = asyncio.Event()
        backend = _RuntimeFakeBackend(gate=gate)
        app = self._build_app(backend)
        async with app.run_test() as pilot:
            query_input = app.query_one("#query_input", Input)
            send_button = app.query_one("#send_button", Button)
            query_input.value = "slow one"
            await pilot.pause()
            await app.action_send_query()
            await pilot.pause()

            self.assertTrue(send_button.disabled)
            self.assertTrue(query_input.disabled)
            self.assertEqual(len(app.query(MessageBubble)), 1)

            gate.set()
            await self._settle(app, pilot)
            self.assertFalse(send_button.disabled)
            self.assertFalse(query_input.disabled)
            self.assertIs(app.focused, query_input)
            self.assertEqual(len(app.query(MessageBubble)), 2)

            # The unlocked input keeps what is typed next.
            query_input.value = "my next question"
            await pilot.pause()
            self.assertEqual(query_input.value, "my next question")
            self.assertEqual(app.store.state.query_buffer, "my next question")

    async def test_text_card_locked_while_text_ingest_in_flight(self) -> None:
        text_gate = asyncio.Event()
        backend = _RuntimeFakeBackend(text_gate=text_gate)
        app = self._build_app(backend)
        async with app.run_test() as pilot:
            text_area = app.query_one("#ingest_text", TextArea)
            ingest_button = app.query_one("#ingest_text_button", Button)
            text_area.insert("Enums carry data.")
            await pilot.pause()

            await app.action_ingest_text()
            await pilot.pause()
            self.assertTrue(text_area.disabled)
            self.assertTrue(ingest_button.disabled)

            await app.action_ingest_text()
            await pilot.pause()
            self.assertEqual(backend.texts, ["Enums carry data."])

            text_gate.set()
            await self._settle(app, pilot)
            self.assertFalse(text_area.disabled)
            self.assertFalse(ingest_button.disabled)
            self.assertEqual(text_area.text, "")


    async def test_feedback_button_sends_vote(self) -> None:
        backend = _RuntimeFakeBackend()
        app = self._build_app(backend)
        async with app.run_test() as pilot:
            await app.conversation.submit_query("hello world")
            await pilot.pause()

            answer_bubble = list(app.query(MessageBubble))[-1]
            answer_bubble.query_one("#downvote_button", Button).press()
            await self._settle(app, pilot)

            self.assertEqual(backend.votes, [("hello world", "fn main() {}", False)])

    async def test_text_ingest_clears_text_area(self) -> None:
        backend = _RuntimeFakeBackend()
        app = self._build_app(backend)
        async with app.run_test() as pilot:
            text_area = app.query_one("#ingest_text", TextArea)
            text_area.insert("Traits define shared behavior.")
            await pilot.pause()

            await app.action_ingest_text()
            await self._settle(app, pilot)

            self.assertEqual(backend.texts, ["Traits define shared behavior."])
            self.assertEqual(text_area.text, "")
            self.assertIs(
                app.store.state.status_for(IngestionFlow.TEXT).phase,
                IngestionPhase.SUCCEEDED,
            )

    async def test_file_ingest_resets_picker(self) -> None:
        backend = _RuntimeFakeBackend()
        app = self._build_app(backend)
        with tempfile.TemporaryDirectory() as temp_dir:
            doc_path = Path(temp_dir) / "notes.txt"
            doc_path.write_text("Borrow checker notes", encoding="utf-8")
            async with app.run_test() as pilot:
                ingest_button = app.query_one("#ingest_file_button", Button)
                self.assertTrue(ingest_button.disabled)

                path_input = app.query_one("#file_path_input", Input)
                path_input.value = str(doc_path)
                await pilot.pause()
                self.assertFalse(ingest_button.disabled)

                await app.action_ingest_file()
                await self._settle(app, pilot)

                self.assertEqual(backend.files, [("notes.txt", b"Borrow checker notes")])
                self.assertEqual(path_input.value, "")
                self.assertTrue(ingest_button.disabled)

    async def test_failed_shutdown_is_reported(self) -> None:
        backend = _RuntimeFakeBackend()
        app = self._build_app(backend)
        async with app.run_test():
            with self.assertLogs("rustcoder_tui.app", level="WARNING") as logs:
                await app._shutdown_backend()
            self.assertEqual(backend.shutdown_calls, 1)
            self.assertTrue(any("app.shutdown.failed" in line for line in logs.output))


class _FakeDialogProcess:
    def __init__(self, output: bytes = b"", hang: bool = False) -> None:
        self.output = output
        self.hang = hang
        self.returncode: int | None = None
        self.killed = False
        self.waited = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self.hang:
            await asyncio.Event().wait()
        self.returncode = 0
        return self.output, b""

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    async def wait(self) -> int:
        self.waited = True
        return self.returncode if self.returncode is not None else 0


class NativeFileDialogTests(unittest.IsolatedAsyncioTestCase):
    """Validate the native file dialog fallback."""

    async def test_returns_none_when_no_picker_available(self) -> None:
        from unittest.mock import patch

        from rustcoder_tui.file_picker import open_native_file_dialog

        with patch("rustcoder_tui.file_picker.shutil.which", return_value=None):
            result = await open_native_file_dialog(title="Test")
        self.assertIsNone(result)

    async def test_timed_out_dialog_is_killed_and_not_followed(self) -> None:
        from unittest.mock import patch

        from rustcoder_tui.file_picker import open_native_file_dialog

        hung = _FakeDialogProcess(hang=True)
        launched: list[list[str]] = []

        async def _spawn(*command, **_kwargs):
            launched.append(list(command))
            return hung

        with patch(
            "rustcoder_tui.file_picker._dialog_commands",
            return_value=[["zenity"], ["kdialog"]],
        ), patch("rustcoder_tui.file_picker.DIALOG_TIMEOUT_SECONDS", 0.01), patch(
            "rustcoder_tui.file_picker.asyncio.create_subprocess_exec", _spawn
        ):
            result = await open_native_file_dialog(title="Test")

        self.assertIsNone(result)
        self.assertEqual(launched, [["zenity"]])
        self.assertTrue(hung.killed)
        self.assertTrue(hung.waited)

    async def test_launch_failure_falls_through_to_next_backend(self) -> None:
        from unittest.mock import patch

        from rustcoder_tui.file_picker import open_native_file_dialog

        chooser = _FakeDialogProcess(output=b"/tmp/guide.md\n")

        async def _spawn(*command, **_kwargs):
            if command[0] == "zenity":
                raise OSError("cannot open display")
            return chooser

        with patch(
            "rustcoder_tui.file_picker._dialog_commands",
            return_value=[["zenity"], ["kdialog"]],
        ), patch("rustcoder_tui.file_picker.asyncio.create_subprocess_exec", _spawn):
            result = await open_native_file_dialog(title="Test")

        self.assertEqual(result, "/tmp/guide.md")


if __name__ == "__main__":
    unittest.main()
