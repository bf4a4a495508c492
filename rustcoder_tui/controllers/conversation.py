"""Query submission lifecycle and the ordered message history."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import BackendError
from ..parser import extract_code
from ..state import (
    Message,
    QuerySettled,
    QuerySubmitted,
    ResponseReceived,
    Sender,
    SessionStore,
    next_message_id,
)

if TYPE_CHECKING:
    from ..client import BackendClient

LOGGER = logging.getLogger(__name__)

QUERY_FAILED_TEXT = "Sorry, something went wrong. Please try again."


class ConversationController:
    """Append user/assistant turns and guard against overlapping queries."""

    def __init__(self, store: SessionStore, client: BackendClient) -> None:
        self._store = store
        self._client = client

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._store.state.messages

    @property
    def query_in_flight(self) -> bool:
        return self._store.state.query_in_flight

    def _new_message(
        self, sender: Sender, text: str, original_query: str | None = None
    ) -> Message:
        return Message(
            id=next_message_id(self._store.state.messages),
            sender=sender,
            text=text,
            original_query=original_query,
        )

    async def submit_query(self, query: str | None = None) -> Message | None:
        """Run one turn and return the assistant message it produced.

        Returns ``None`` without touching state when the query is blank or
        another query is still in flight. The user message is appended
        before the request is sent; the in-flight flag and the query buffer
        are reset on every exit path.
        """
        text = self._store.state.query_buffer if query is None else query
        if not text.strip() or self._store.state.query_in_flight:
            return None

        self._store.dispatch(QuerySubmitted(self._new_message(Sender.USER, text)))
        LOGGER.info(
            "query.submitted",
            extra={"event": "query.submitted", "chars": len(text)},
        )
        try:
            try:
                raw_response = await self._client.query(text)
            except BackendError as exc:
                LOGGER.warning(
                    "query.failed",
                    extra={"event": "query.failed", "reason": str(exc)},
                )
                reply = self._new_message(Sender.ASSISTANT, QUERY_FAILED_TEXT)
            else:
                reply = self._new_message(
                    Sender.ASSISTANT, extract_code(raw_response), original_query=text
                )
            self._store.dispatch(ResponseReceived(reply))
            return reply
        finally:
            self._store.dispatch(QuerySettled())
