"""Fire-and-forget ratings for generated answers."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import TYPE_CHECKING

from ..exceptions import BackendError
from ..state import Message

if TYPE_CHECKING:
    from ..client import BackendClient

LOGGER = logging.getLogger(__name__)

FEEDBACK_SENT_NOTICE = "Thanks for your feedback!"
FEEDBACK_FAILED_NOTICE = "Failed to submit feedback."

# (message, severity) with Textual's severities: information, warning, error.
Notifier = Callable[[str, str], None]


class FeedbackController:
    """Send up/down votes tied to the query that produced an answer.

    No local state is kept: the same message may be rated any number of
    times, in either direction.
    """

    def __init__(self, client: BackendClient, notify: Notifier) -> None:
        self._client = client
        self._notify = notify

    async def submit_feedback(
        self, original_query: str | None, code: str, upvoted: bool
    ) -> bool:
        if not original_query:
            return False
        try:
            await self._client.submit_feedback(original_query, code, upvoted)
        except BackendError as exc:
            LOGGER.warning(
                "feedback.failed",
                extra={"event": "feedback.failed", "reason": str(exc)},
            )
            self._notify(FEEDBACK_FAILED_NOTICE, "error")
            return False
        LOGGER.info(
            "feedback.sent",
            extra={"event": "feedback.sent", "upvoted": upvoted},
        )
        self._notify(FEEDBACK_SENT_NOTICE, "information")
        return True

    async def submit_for_message(self, message: Message, upvoted: bool) -> bool:
        """Rate an assistant message; messages without a query are ignored."""
        return await self.submit_feedback(message.original_query, message.text, upvoted)
