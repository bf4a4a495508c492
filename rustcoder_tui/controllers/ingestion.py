"""Text and file ingestion flows."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..exceptions import BackendError
from ..state import (
    FileIngested,
    FileSelected,
    IngestionFlow,
    IngestionPhase,
    IngestionStatus,
    IngestionStatusChanged,
    PendingFile,
    SessionStore,
    TextIngested,
)

if TYPE_CHECKING:
    from ..client import BackendClient

LOGGER = logging.getLogger(__name__)

EMPTY_CONTENT_STATUS = "Content cannot be empty."
TEXT_IN_PROGRESS_STATUS = "Ingesting text..."
TEXT_SUCCEEDED_STATUS = "Successfully ingested text!"
TEXT_FAILED_STATUS = "Failed to ingest text."

NO_FILE_STATUS = "Please select a file first."
FILE_IN_PROGRESS_STATUS = "Ingesting file: {name}..."
FILE_SUCCEEDED_STATUS = "Successfully ingested file!"
FILE_FAILED_STATUS = "Failed to ingest file."


class IngestionController:
    """Drive the two independent one-shot upload flows.

    Each flow only ever touches its own status entry and its own input
    holder, so a text ingest and a file ingest may run at the same time.
    """

    def __init__(self, store: SessionStore, client: BackendClient) -> None:
        self._store = store
        self._client = client

    def _set_status(
        self, flow: IngestionFlow, phase: IngestionPhase, message: str
    ) -> None:
        self._store.dispatch(
            IngestionStatusChanged(flow=flow, status=IngestionStatus(phase, message))
        )

    def select_file(self, raw_path: str) -> PendingFile | None:
        """Record the file chosen by the user (an empty path clears it)."""
        pending = PendingFile.from_user_path(raw_path)
        self._store.dispatch(FileSelected(pending))
        return pending

    async def ingest_text(self, content: str | None = None) -> bool:
        """Send pasted text; the buffer is cleared only when the upload succeeds."""
        text = self._store.state.text_buffer if content is None else content
        if not text.strip():
            self._set_status(
                IngestionFlow.TEXT,
                IngestionPhase.VALIDATION_FAILED,
                EMPTY_CONTENT_STATUS,
            )
            return False

        self._set_status(
            IngestionFlow.TEXT, IngestionPhase.IN_PROGRESS, TEXT_IN_PROGRESS_STATUS
        )
        try:
            await self._client.ingest_text(text)
        except BackendError as exc:
            LOGGER.warning(
                "ingest.text.failed",
                extra={"event": "ingest.text.failed", "reason": str(exc)},
            )
            self._set_status(
                IngestionFlow.TEXT, IngestionPhase.FAILED, TEXT_FAILED_STATUS
            )
            return False

        LOGGER.info(
            "ingest.text.succeeded",
            extra={"event": "ingest.text.succeeded", "chars": len(text)},
        )
        self._store.dispatch(TextIngested())
        self._set_status(
            IngestionFlow.TEXT, IngestionPhase.SUCCEEDED, TEXT_SUCCEEDED_STATUS
        )
        return True

    async def ingest_file(self, pending: PendingFile | None = None) -> bool:
        """Upload the selected file; the selection survives a failed attempt."""
        target = self._store.state.pending_file if pending is None else pending
        if target is None:
            self._set_status(
                IngestionFlow.FILE, IngestionPhase.VALIDATION_FAILED, NO_FILE_STATUS
            )
            return False

        self._set_status(
            IngestionFlow.FILE,
            IngestionPhase.IN_PROGRESS,
            FILE_IN_PROGRESS_STATUS.format(name=target.name),
        )
        try:
            data = await asyncio.to_thread(target.path.read_bytes)
            await self._client.ingest_file(target.name, data)
        except (BackendError, OSError) as exc:
            LOGGER.warning(
                "ingest.file.failed",
                extra={
                    "event": "ingest.file.failed",
                    "path": str(target.path),
                    "reason": str(exc),
                },
            )
            self._set_status(
                IngestionFlow.FILE, IngestionPhase.FAILED, FILE_FAILED_STATUS
            )
            return False

        LOGGER.info(
            "ingest.file.succeeded",
            extra={
                "event": "ingest.file.succeeded",
                "path": str(target.path),
                "bytes": len(data),
            },
        )
        self._store.dispatch(FileIngested())
        self._set_status(
            IngestionFlow.FILE, IngestionPhase.SUCCEEDED, FILE_SUCCEEDED_STATUS
        )
        return True
