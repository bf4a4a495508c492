"""Widget exports for the rustcoder_tui UI."""

from .conversation import ConversationView
from .ingest_panel import IngestPanel
from .message import MessageBubble
from .query_box import QueryBox
from .status_bar import StatusBar

__all__ = ["ConversationView", "IngestPanel", "MessageBubble", "QueryBox", "StatusBar"]
