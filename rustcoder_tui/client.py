"""Async HTTP client for the Rust Coder backend API."""

from __future__ import annotations

import logging
import mimetypes
from typing import Any

import httpx

from .exceptions import BackendConnectionError, BackendResponseError

LOGGER = logging.getLogger(__name__)

DEFAULT_TEXT_INGEST_PATH = "/api/ingest/text"
FILE_INGEST_PATH = "/api/ingest/file"
QUERY_PATH = "/api/query"
FEEDBACK_PATH = "/api/feedback"
SHUTDOWN_PATH = "/api/shutdown"
HEALTH_PATH = "/"

# Multipart field name the backend reads the uploaded document from.
DOCUMENT_FIELD = "document"


class BackendClient:
    """Thin wrapper over ``httpx.AsyncClient`` bound to a single base URL.

    Every call is attempted exactly once. Transport problems surface as
    :class:`BackendConnectionError`, non-success statuses and malformed
    bodies as :class:`BackendResponseError`.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        text_ingest_path: str = DEFAULT_TEXT_INGEST_PATH,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.text_ingest_path = text_ingest_path
        self._http = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout
        )

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *_exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            LOGGER.warning(
                "backend.request.unreachable",
                extra={
                    "event": "backend.request.unreachable",
                    "method": method,
                    "path": path,
                    "reason": str(exc) or type(exc).__name__,
                },
            )
            raise BackendConnectionError(
                f"Unable to reach backend at {self.base_url}: {exc}"
            ) from exc

        if response.is_success:
            LOGGER.debug(
                "backend.request.ok",
                extra={
                    "event": "backend.request.ok",
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                },
            )
            return response

        LOGGER.warning(
            "backend.request.rejected",
            extra={
                "event": "backend.request.rejected",
                "method": method,
                "path": path,
                "status_code": response.status_code,
            },
        )
        raise BackendResponseError(
            f"{method} {path} failed with HTTP {response.status_code}",
            status_code=response.status_code,
        )

    async def ingest_text(self, content: str) -> None:
        """Send pasted document text to the knowledge base."""
        await self._request("POST", self.text_ingest_path, json={"content": content})

    async def ingest_file(
        self,
        filename: str,
        data: bytes,
        content_type: str | None = None,
    ) -> None:
        """Upload a document as a multipart body under the ``document`` field."""
        mime = content_type or mimetypes.guess_type(filename)[0] or "text/plain"
        await self._request(
            "POST",
            FILE_INGEST_PATH,
            files={DOCUMENT_FIELD: (filename, data, mime)},
        )

    async def query(self, query: str) -> str:
        """Ask the code-generation service and return its raw answer text."""
        response = await self._request("POST", QUERY_PATH, json={"query": query})
        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendResponseError(
                "Query response is not valid JSON.", status_code=response.status_code
            ) from exc
        answer = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(answer, str):
            raise BackendResponseError(
                "Query response has no 'response' string.",
                status_code=response.status_code,
            )
        return answer

    async def submit_feedback(self, query: str, code: str, upvoted: bool) -> None:
        """Rate the answer ``code`` that was generated for ``query``."""
        await self._request(
            "POST",
            FEEDBACK_PATH,
            json={"query": query, "code": code, "upvoted": upvoted},
        )

    async def check_connection(self) -> bool:
        """Return True when the backend root endpoint answers successfully."""
        try:
            await self._request("GET", HEALTH_PATH)
        except (BackendConnectionError, BackendResponseError):
            return False
        return True

    async def shutdown(self) -> None:
        """Ask the backend to stop its vector store container."""
        await self._request("POST", SHUTDOWN_PATH)
