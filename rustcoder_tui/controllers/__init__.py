"""Controllers that sequence backend requests and update the session store.

- IngestionController: pasted-text and file upload flows
- ConversationController: query submission and message history
- FeedbackController: up/down ratings for generated answers
"""

from __future__ import annotations

from .conversation import QUERY_FAILED_TEXT, ConversationController
from .feedback import FeedbackController
from .ingestion import IngestionController

__all__ = [
    "ConversationController",
    "FeedbackController",
    "IngestionController",
    "QUERY_FAILED_TEXT",
]
