"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Static

from ..state import Message as ChatMessage
from ..state import Sender


class MessageBubble(Vertical):
    """Render one history entry; rateable answers get feedback buttons."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    MessageBubble > #feedback-row {
        height: auto;
        align-horizontal: right;
    }
    MessageBubble > #feedback-row > Button {
        min-width: 6;
        margin-left: 1;
    }
    """

    class FeedbackRequested(Message):
        """Posted when the user rates the answer shown in this bubble."""

        def __init__(self, chat_message: ChatMessage, upvoted: bool) -> None:
            super().__init__()
            self.chat_message = chat_message
            self.upvoted = upvoted

    def __init__(
        self,
        chat_message: ChatMessage,
        timestamp: str = "",
        code_language: str = "rust",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.chat_message = chat_message
        self.timestamp = timestamp
        self.code_language = code_language
        self.add_class(f"role-{chat_message.sender.value}")

    @property
    def role_prefix(self) -> str:
        return "You" if self.chat_message.sender is Sender.USER else "Assistant"

    @property
    def shows_code(self) -> bool:
        return self.chat_message.can_receive_feedback

    def _compose_header(self) -> str:
        if self.timestamp:
            return f"**{self.role_prefix}**  _{self.timestamp}_"
        return f"**{self.role_prefix}**"

    def _content_renderable(self) -> Syntax | Text:
        if self.shows_code:
            return Syntax(
                self.chat_message.text,
                self.code_language,
                word_wrap=True,
                background_color="default",
            )
        return Text(self.chat_message.text)

    def compose(self) -> ComposeResult:
        yield Static(Markdown(self._compose_header()), id="header-block")
        yield Static(self._content_renderable(), id="content-block")
        if self.shows_code:
            with Horizontal(id="feedback-row"):
                yield Button("👍", id="upvote_button", variant="success")
                yield Button("👎", id="downvote_button", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id not in {"upvote_button", "downvote_button"}:
            return
        event.stop()
        self.post_message(
            self.FeedbackRequested(
                self.chat_message, upvoted=event.button.id == "upvote_button"
            )
        )
