"""Side panel with the pasted-text and file ingestion flows."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Input, Static, TextArea

from ..state import IngestionFlow, IngestionPhase, IngestionStatus

_STATUS_IDS = {
    IngestionFlow.TEXT: "text_status",
    IngestionFlow.FILE: "file_status",
}


class IngestPanel(Vertical):
    """Two independent cards, each with its own input and status line."""

    DEFAULT_CSS = """
    IngestPanel {
        width: 48;
        height: 1fr;
        padding: 0 1;
        border-right: solid $panel;
    }
    IngestPanel .panel-title {
        text-style: bold;
        padding: 1 0 0 0;
    }
    IngestPanel #ingest_text {
        height: 12;
    }
    IngestPanel #file_row {
        height: auto;
    }
    IngestPanel #file_path_input {
        width: 1fr;
    }
    IngestPanel .ingest-status {
        color: $text-muted;
    }
    IngestPanel .status-failed {
        color: $error;
    }
    IngestPanel .status-succeeded {
        color: $success;
    }
    """

    class IngestTextRequested(Message):
        """Posted when the user asks to ingest the pasted text."""

    class IngestFileRequested(Message):
        """Posted when the user asks to ingest the selected file."""

    class BrowseRequested(Message):
        """Posted when the user wants to pick a file from disk."""

    def compose(self) -> ComposeResult:
        yield Static("Ingest by Pasting Text", classes="panel-title")
        yield TextArea(id="ingest_text")
        yield Button("Ingest Text", id="ingest_text_button", variant="primary")
        yield Static("", id="text_status", classes="ingest-status")
        yield Static("Ingest by Attaching File", classes="panel-title")
        with Horizontal(id="file_row"):
            yield Input(placeholder="Path to a document...", id="file_path_input")
            yield Button("Browse", id="browse_button")
        yield Button(
            "Ingest File", id="ingest_file_button", variant="primary", disabled=True
        )
        yield Static("", id="file_status", classes="ingest-status")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Forward panel buttons as messages for the app to act on."""
        if event.button.id == "ingest_text_button":
            event.stop()
            self.post_message(self.IngestTextRequested())
        elif event.button.id == "ingest_file_button":
            event.stop()
            self.post_message(self.IngestFileRequested())
        elif event.button.id == "browse_button":
            event.stop()
            self.post_message(self.BrowseRequested())

    def set_status(self, flow: IngestionFlow, status: IngestionStatus) -> None:
        label = self.query_one(f"#{_STATUS_IDS[flow]}", Static)
        label.update(status.message)
        label.set_class(
            status.phase in {IngestionPhase.FAILED, IngestionPhase.VALIDATION_FAILED},
            "status-failed",
        )
        label.set_class(status.phase is IngestionPhase.SUCCEEDED, "status-succeeded")
        if flow is IngestionFlow.TEXT:
            busy = status.phase is IngestionPhase.IN_PROGRESS
            self.query_one("#ingest_text", TextArea).disabled = busy
            self.query_one("#ingest_text_button", Button).disabled = busy

    def sync_text(self, text: str) -> None:
        text_area = self.query_one("#ingest_text", TextArea)
        if text_area.text != text:
            text_area.load_text(text)

    def set_file_selected(self, selected: bool) -> None:
        self.query_one("#ingest_file_button", Button).disabled = not selected

    def set_file_path(self, path: str) -> None:
        self.query_one("#file_path_input", Input).value = path

    def reset_file_picker(self) -> None:
        """Clear the path field after a successful upload."""
        self.set_file_path("")
