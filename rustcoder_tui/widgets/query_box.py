"""Query input row with the send button."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input


class QueryBox(Horizontal):
    """Input region for the conversation; the app handles submit and send."""

    def compose(self) -> ComposeResult:
        yield Input(
            placeholder="Ask for Rust code... (Enter to send)",
            id="query_input",
        )
        yield Button("Send", id="send_button", variant="success")

    def set_busy(self, busy: bool) -> None:
        """Lock the input row while a query is in flight."""
        query_input = self.query_one("#query_input", Input)
        was_busy = query_input.disabled
        query_input.disabled = busy
        self.query_one("#send_button", Button).disabled = busy
        if was_busy and not busy:
            query_input.focus()

    def sync_query(self, text: str) -> None:
        query_input = self.query_one("#query_input", Input)
        if query_input.value != text:
            query_input.value = text
