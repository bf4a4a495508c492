"""Domain exception hierarchy for the Rust Coder client."""

from __future__ import annotations


class RustCoderError(RuntimeError):
    """Base class for all domain-level client errors."""


class BackendError(RustCoderError):
    """Raised when a backend request does not complete successfully."""


class BackendConnectionError(BackendError):
    """Raised when the backend cannot be reached or the request times out."""


class BackendResponseError(BackendError):
    """Raised for non-success responses and malformed response bodies."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigValidationError(RustCoderError):
    """Raised when configuration cannot be validated safely."""
