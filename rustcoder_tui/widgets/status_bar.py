"""Status bar widget for connection and conversation telemetry."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widgets import Label, Static

from ..state import ConnectionState


class StatusBar(Static):
    """Render compact runtime status information.

    Segments (left to right):
        🟢 online  |  Messages: 4  |  ⏳ waiting for answer
    """

    DEFAULT_CSS = """
    StatusBar {
        layout: horizontal;
        height: auto;
    }
    StatusBar Label {
        margin-right: 1;
    }
    StatusBar #status_activity {
        color: $text-muted;
    }
    """

    _CONNECTION_ICONS = {
        ConnectionState.ONLINE: "🟢",
        ConnectionState.OFFLINE: "🔴",
        ConnectionState.UNKNOWN: "⚪",
    }

    def compose(self) -> ComposeResult:
        yield Label("⚪ unknown", id="status_connection")
        yield Label("|", id="status_sep1")
        yield Label("Messages: 0", id="status_messages")
        yield Label("|", id="status_sep2")
        yield Label("", id="status_activity")

    def set_status(
        self,
        *,
        connection: ConnectionState,
        message_count: int,
        query_in_flight: bool,
    ) -> None:
        """Update all status segment labels."""
        icon = self._CONNECTION_ICONS.get(connection, "⚪")
        self.query_one("#status_connection", Label).update(f"{icon} {connection.value}")
        self.query_one("#status_messages", Label).update(f"Messages: {message_count}")
        activity = self.query_one("#status_activity", Label)
        activity.update("⏳ waiting for answer" if query_in_flight else "")
        self.query_one("#status_sep2", Label).display = query_in_flight
