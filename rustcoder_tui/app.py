"""Main Textual application for the Rust Coder knowledge base client."""

from __future__ import annotations

import asyncio
from datetime import datetime
import logging
import random
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Header, Input, TextArea

from .client import BackendClient
from .config import load_config
from .controllers import ConversationController, FeedbackController, IngestionController
from .exceptions import BackendError
from .file_picker import open_native_file_dialog
from .screens import ConfirmScreen, FilePathScreen
from .state import (
    Action,
    ConnectionChanged,
    ConnectionState,
    IngestionFlow,
    IngestionPhase,
    Message,
    QueryBufferEdited,
    QuerySettled,
    Sender,
    SessionState,
    SessionStore,
    TextBufferEdited,
    TextIngested,
)
from .task_manager import TaskManager
from .widgets.conversation import ConversationView
from .widgets.ingest_panel import IngestPanel
from .widgets.message import MessageBubble
from .widgets.query_box import QueryBox
from .widgets.status_bar import StatusBar

LOGGER = logging.getLogger(__name__)


class RustCoderApp(App[None]):
    """Ingest documents into the knowledge base and ask for Rust code."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        height: 1fr;
    }

    #chat-column {
        width: 1fr;
        height: 1fr;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    QueryBox {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #query_input {
        width: 1fr;
    }

    #send_button {
        margin-left: 1;
        min-width: 10;
    }

    #status_bar {
        height: auto;
        padding: 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        background: $primary;
    }

    .message-assistant {
        background: $surface;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_query": "Send",
        "ingest_text": "Ingest Text",
        "ingest_file": "Ingest File",
        "browse_file": "Browse",
        "copy_last_code": "Copy Code",
        "shutdown_backend": "Stop Store",
        "quit": "Quit",
    }

    def __init__(
        self,
        config: dict[str, dict[str, Any]] | None = None,
        backend: BackendClient | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.window_title = str(self.config["app"]["title"])

        backend_cfg = self.config["backend"]
        self.backend = backend or BackendClient(
            base_url=str(backend_cfg["base_url"]),
            timeout=float(backend_cfg["timeout"]),
            text_ingest_path=str(backend_cfg["text_ingest_path"]),
        )
        self.store = SessionStore()
        self.ingestion = IngestionController(self.store, self.backend)
        self.conversation = ConversationController(self.store, self.backend)
        self.feedback = FeedbackController(self.backend, self._notify_user)
        self._task_manager = TaskManager()
        self._rendered_message_count = 0
        self._rendered_picker_generation = 0
        self._ui_ready = False
        self._unsubscribe_store = self.store.subscribe(self._on_state_changed)
        self._binding_specs = self._binding_specs_from_config(self.config)
        super().__init__()

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=action_name != "shutdown_backend",
                    )
                )
        return bindings

    def compose(self) -> ComposeResult:
        """Compose app widgets."""
        yield Header()
        with Horizontal(id="app-root"):
            yield IngestPanel(id="ingest_panel")
            with Vertical(id="chat-column"):
                yield ConversationView(id="conversation")
                yield QueryBox(id="query_box")
        yield StatusBar(id="status_bar")
        yield Footer()

    async def on_mount(self) -> None:
        """Register keybindings, render the initial state, start monitoring."""
        self.title = self.window_title
        self.sub_title = f"Backend: {self.backend.base_url}"
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )
        self._render_state(self.store.state)
        self._ui_ready = True
        self.query_one("#query_input", Input).focus()
        self._task_manager.spawn(
            self._connection_monitor_loop(), name="connection_monitor"
        )

    async def on_unmount(self) -> None:
        """Drop pending work so late responses never touch a closed UI."""
        self._ui_ready = False
        self._unsubscribe_store()
        await self._task_manager.cancel_all()
        await self.backend.aclose()

    # -- state rendering ---------------------------------------------------

    def _on_state_changed(self, state: SessionState, action: Action) -> None:
        if not self._ui_ready:
            return
        LOGGER.debug(
            "app.render",
            extra={"event": "app.render", "action": type(action).__name__},
        )
        self._render_state(state, action)

    def _message_timestamp(self, message: Message) -> str:
        if not bool(self.config["ui"]["show_timestamps"]):
            return ""
        return datetime.fromtimestamp(message.id / 1000).strftime("%H:%M:%S")

    def _render_state(self, state: SessionState, action: Action | None = None) -> None:
        # Inputs are only written back when a flow clears them; otherwise the
        # widgets lead and the store follows their change events.
        panel = self.query_one(IngestPanel)
        for flow in IngestionFlow:
            panel.set_status(flow, state.status_for(flow))
        if isinstance(action, TextIngested):
            panel.sync_text(state.text_buffer)
        panel.set_file_selected(state.pending_file is not None)
        if state.file_picker_generation != self._rendered_picker_generation:
            self._rendered_picker_generation = state.file_picker_generation
            panel.reset_file_picker()

        query_box = self.query_one(QueryBox)
        query_box.set_busy(state.query_in_flight)
        if isinstance(action, QuerySettled):
            query_box.sync_query(state.query_buffer)

        conversation = self.query_one(ConversationView)
        code_language = str(self.config["ui"]["code_language"])
        for message in state.messages[self._rendered_message_count :]:
            conversation.append_message(
                message,
                timestamp=self._message_timestamp(message),
                code_language=code_language,
            )
        self._rendered_message_count = len(state.messages)

        self.query_one(StatusBar).set_status(
            connection=state.connection,
            message_count=len(state.messages),
            query_in_flight=state.query_in_flight,
        )

    def _notify_user(self, message: str, severity: str) -> None:
        self.notify(message, severity=severity)  # type: ignore[arg-type]

    # -- input wiring --------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "query_input":
            self.store.dispatch(QueryBufferEdited(event.input.value))
        elif event.input.id == "file_path_input":
            self.ingestion.select_file(event.input.value)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id == "ingest_text":
            self.store.dispatch(TextBufferEdited(event.text_area.text))

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "query_input":
            await self.action_send_query()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Send the query when its button is clicked."""
        if event.button.id == "send_button":
            await self.action_send_query()

    async def on_ingest_panel_ingest_text_requested(
        self, _message: IngestPanel.IngestTextRequested
    ) -> None:
        await self.action_ingest_text()

    async def on_ingest_panel_ingest_file_requested(
        self, _message: IngestPanel.IngestFileRequested
    ) -> None:
        await self.action_ingest_file()

    async def on_ingest_panel_browse_requested(
        self, _message: IngestPanel.BrowseRequested
    ) -> None:
        await self.action_browse_file()

    async def on_message_bubble_feedback_requested(
        self, message: MessageBubble.FeedbackRequested
    ) -> None:
        self._task_manager.spawn(
            self.feedback.submit_for_message(message.chat_message, message.upvoted)
        )

    # -- actions -------------------------------------------------------------

    async def action_send_query(self) -> None:
        """Start a conversation turn without blocking the event loop."""
        self._task_manager.spawn(self.conversation.submit_query())

    async def action_ingest_text(self) -> None:
        text_status = self.store.state.status_for(IngestionFlow.TEXT)
        if text_status.phase is IngestionPhase.IN_PROGRESS:
            return
        self._task_manager.spawn(self.ingestion.ingest_text())

    async def action_ingest_file(self) -> None:
        self._task_manager.spawn(self.ingestion.ingest_file())

    async def action_browse_file(self) -> None:
        """Pick a document with a native dialog, falling back to a prompt."""
        self._task_manager.spawn(self._browse_for_file())

    async def _browse_for_file(self) -> None:
        path = await open_native_file_dialog("Select document to ingest")
        if path:
            self.query_one(IngestPanel).set_file_path(path)
            return
        self.push_screen(FilePathScreen(), callback=self._on_file_path_entered)

    def _on_file_path_entered(self, path: str | None) -> None:
        if path:
            self.query_one(IngestPanel).set_file_path(path)

    async def action_copy_last_code(self) -> None:
        """Copy the latest rateable answer to the clipboard."""
        for message in reversed(self.store.state.messages):
            if message.sender is Sender.ASSISTANT and message.can_receive_feedback:
                self.copy_to_clipboard(message.text)
                self.sub_title = "Copied latest code answer."
                return
        self.sub_title = "No code answer available to copy."

    async def action_shutdown_backend(self) -> None:
        """Ask for confirmation before stopping the backend vector store."""
        self.push_screen(
            ConfirmScreen(
                "Stop the backend knowledge store? Ingestion and queries will fail "
                "until the backend is restarted.",
                confirm_label="Stop",
            ),
            callback=self._on_shutdown_confirmed,
        )

    def _on_shutdown_confirmed(self, confirmed: bool | None) -> None:
        if confirmed:
            self._task_manager.spawn(self._shutdown_backend())

    async def _shutdown_backend(self) -> None:
        try:
            await self.backend.shutdown()
        except BackendError as exc:
            LOGGER.warning(
                "app.shutdown.failed",
                extra={"event": "app.shutdown.failed", "reason": str(exc)},
            )
            self._notify_user("Failed to stop the knowledge store.", "error")
            return
        LOGGER.info("app.shutdown.sent", extra={"event": "app.shutdown.sent"})
        self._notify_user("Knowledge store stopped.", "information")

    # -- background --------------------------------------------------------

    async def _connection_monitor_loop(self) -> None:
        interval = int(self.config["app"]["connection_check_interval_seconds"])
        try:
            while True:
                connected = await self.backend.check_connection()
                new_state = (
                    ConnectionState.ONLINE if connected else ConnectionState.OFFLINE
                )
                if new_state != self.store.state.connection:
                    LOGGER.info(
                        "app.connection.state",
                        extra={
                            "event": "app.connection.state",
                            "connection_state": new_state.value,
                        },
                    )
                self.store.dispatch(ConnectionChanged(new_state))
                await asyncio.sleep(interval * random.uniform(0.85, 1.15))
        except asyncio.CancelledError:
            LOGGER.info(
                "app.connection.monitor.stopped",
                extra={"event": "app.connection.monitor.stopped"},
            )
            raise
