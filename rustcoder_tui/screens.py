"""Modal screens for confirmations and path entry."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no question; dismisses with True only on explicit confirmation."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #confirm-body {
        padding-bottom: 1;
    }

    #confirm-actions {
        height: 3;
        align: right middle;
    }

    #confirm-actions Button {
        margin-left: 1;
    }
    """

    def __init__(self, question: str, confirm_label: str = "Confirm") -> None:
        super().__init__()
        self._question = question
        self._confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Container(id="confirm-dialog"):
            yield Static(self._question, id="confirm-body")
            with Horizontal(id="confirm-actions"):
                yield Button("Cancel", id="confirm-cancel")
                yield Button(self._confirm_label, id="confirm-ok", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "confirm-ok")

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(False)


class FilePathScreen(ModalScreen[str | None]):
    """Prompt for a document path when no native file dialog is available."""

    CSS = """
    FilePathScreen {
        align: center middle;
    }

    #path-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #path-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #path-input {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def __init__(self, title: str = "Document path", initial: str = "") -> None:
        super().__init__()
        self._title = title
        self._initial = initial

    def compose(self) -> ComposeResult:
        with Container(id="path-dialog"):
            yield Static(self._title, id="path-title")
            yield Input(
                value=self._initial,
                placeholder="~/docs/ownership.md",
                id="path-input",
            )
            yield Static("Enter to confirm | Esc to cancel", id="path-help")

    def on_mount(self) -> None:
        self.query_one("#path-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "path-input":
            return
        event.stop()
        value = event.value.strip()
        self.dismiss(value or None)

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)
