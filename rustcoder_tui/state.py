"""Session state, actions, and the reducer-backed store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
from pathlib import Path
import time
from typing import Union

LOGGER = logging.getLogger(__name__)


class Sender(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class IngestionFlow(str, Enum):
    """Independent ingestion flows, each with its own status."""

    TEXT = "text"
    FILE = "file"


class IngestionPhase(str, Enum):
    """Lifecycle of a single ingestion attempt."""

    IDLE = "idle"
    VALIDATION_FAILED = "validation_failed"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ConnectionState(str, Enum):
    """Backend reachability as last observed by the health check."""

    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class Message:
    """A single immutable entry of the conversation history."""

    id: int
    sender: Sender
    text: str
    original_query: str | None = None

    @property
    def can_receive_feedback(self) -> bool:
        return bool(self.original_query)


@dataclass(frozen=True)
class IngestionStatus:
    """Phase plus the user-facing status line of an ingestion flow."""

    phase: IngestionPhase = IngestionPhase.IDLE
    message: str = ""


@dataclass(frozen=True)
class PendingFile:
    """The file currently selected for upload."""

    path: Path

    @classmethod
    def from_user_path(cls, raw_path: str) -> PendingFile | None:
        cleaned = raw_path.strip()
        if not cleaned:
            return None
        return cls(path=Path(cleaned).expanduser())

    @property
    def name(self) -> str:
        return self.path.name


def _idle_statuses() -> dict[IngestionFlow, IngestionStatus]:
    return {flow: IngestionStatus() for flow in IngestionFlow}


@dataclass(frozen=True)
class SessionState:
    """Snapshot of everything the UI renders for the current session."""

    messages: tuple[Message, ...] = ()
    ingestion_status: dict[IngestionFlow, IngestionStatus] = field(
        default_factory=_idle_statuses
    )
    query_in_flight: bool = False
    text_buffer: str = ""
    query_buffer: str = ""
    pending_file: PendingFile | None = None
    file_picker_generation: int = 0
    connection: ConnectionState = ConnectionState.UNKNOWN

    def status_for(self, flow: IngestionFlow) -> IngestionStatus:
        return self.ingestion_status.get(flow, IngestionStatus())


@dataclass(frozen=True)
class TextBufferEdited:
    text: str


@dataclass(frozen=True)
class QueryBufferEdited:
    text: str


@dataclass(frozen=True)
class FileSelected:
    pending_file: PendingFile | None


@dataclass(frozen=True)
class IngestionStatusChanged:
    flow: IngestionFlow
    status: IngestionStatus


@dataclass(frozen=True)
class TextIngested:
    """The text flow succeeded; the pasted content is no longer needed."""


@dataclass(frozen=True)
class FileIngested:
    """The file flow succeeded; the selection and picker widget are reset."""


@dataclass(frozen=True)
class QuerySubmitted:
    message: Message


@dataclass(frozen=True)
class ResponseReceived:
    message: Message


@dataclass(frozen=True)
class QuerySettled:
    """The in-flight query finished, successfully or not."""


@dataclass(frozen=True)
class ConnectionChanged:
    connection: ConnectionState


Action = Union[
    TextBufferEdited,
    QueryBufferEdited,
    FileSelected,
    IngestionStatusChanged,
    TextIngested,
    FileIngested,
    QuerySubmitted,
    ResponseReceived,
    QuerySettled,
    ConnectionChanged,
]

Listener = Callable[[SessionState, Action], None]


def next_message_id(messages: tuple[Message, ...]) -> int:
    """Return a millisecond timestamp id strictly greater than the last one."""
    candidate = time.time_ns() // 1_000_000
    if messages:
        candidate = max(candidate, messages[-1].id + 1)
    return candidate


def reduce(state: SessionState, action: Action) -> SessionState:
    """Return the state that results from applying ``action``.

    The input state is never modified. Actions that would not change anything
    return the very same object so the store can skip notifications.
    """
    if isinstance(action, TextBufferEdited):
        if action.text == state.text_buffer:
            return state
        return replace(state, text_buffer=action.text)
    if isinstance(action, QueryBufferEdited):
        if action.text == state.query_buffer:
            return state
        return replace(state, query_buffer=action.text)
    if isinstance(action, FileSelected):
        if action.pending_file == state.pending_file:
            return state
        return replace(state, pending_file=action.pending_file)
    if isinstance(action, IngestionStatusChanged):
        statuses = dict(state.ingestion_status)
        statuses[action.flow] = action.status
        return replace(state, ingestion_status=statuses)
    if isinstance(action, TextIngested):
        return replace(state, text_buffer="")
    if isinstance(action, FileIngested):
        return replace(
            state,
            pending_file=None,
            file_picker_generation=state.file_picker_generation + 1,
        )
    if isinstance(action, QuerySubmitted):
        return replace(
            state,
            messages=state.messages + (action.message,),
            query_in_flight=True,
        )
    if isinstance(action, ResponseReceived):
        return replace(state, messages=state.messages + (action.message,))
    if isinstance(action, QuerySettled):
        return replace(state, query_in_flight=False, query_buffer="")
    if isinstance(action, ConnectionChanged):
        if action.connection == state.connection:
            return state
        return replace(state, connection=action.connection)
    raise TypeError(f"Unsupported action: {action!r}")


class SessionStore:
    """Own the session state and publish every change to subscribers."""

    def __init__(self, initial: SessionState | None = None) -> None:
        self._state = initial or SessionState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def dispatch(self, action: Action) -> SessionState:
        """Apply ``action`` and notify subscribers when the state changed."""
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is previous:
            return self._state
        LOGGER.debug(
            "store.dispatch",
            extra={"event": "store.dispatch", "action": type(action).__name__},
        )
        for listener in list(self._listeners):
            try:
                listener(self._state, action)
            except Exception:  # noqa: BLE001 - one broken view must not stall the rest.
                LOGGER.exception(
                    "store.listener.failed",
                    extra={
                        "event": "store.listener.failed",
                        "action": type(action).__name__,
                    },
                )
        return self._state
