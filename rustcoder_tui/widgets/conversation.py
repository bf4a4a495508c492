"""Scrollable conversation view widget."""

from __future__ import annotations

from textual.containers import VerticalScroll

from ..state import Message
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """A scrollable container that hosts message bubbles in history order."""

    def append_message(
        self,
        message: Message,
        timestamp: str = "",
        code_language: str = "rust",
    ) -> MessageBubble:
        """Create, mount, and scroll to a bubble for ``message``."""
        bubble = MessageBubble(
            message,
            timestamp=timestamp,
            code_language=code_language,
        )
        bubble.add_class(f"message-{message.sender.value}")
        self.mount(bubble)
        self.scroll_end(animate=False)
        return bubble
