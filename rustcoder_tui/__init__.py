"""Top-level package for rustcoder-tui."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import RustCoderApp
    from .client import BackendClient
    from .config import ensure_config_dir, load_config
    from .controllers import (
        ConversationController,
        FeedbackController,
        IngestionController,
    )
    from .exceptions import (
        BackendConnectionError,
        BackendError,
        BackendResponseError,
        ConfigValidationError,
        RustCoderError,
    )
    from .parser import extract_code
    from .state import Message, SessionState, SessionStore

__all__ = [
    "BackendClient",
    "BackendConnectionError",
    "BackendError",
    "BackendResponseError",
    "ConfigValidationError",
    "ConversationController",
    "FeedbackController",
    "IngestionController",
    "Message",
    "RustCoderApp",
    "RustCoderError",
    "SessionState",
    "SessionStore",
    "ensure_config_dir",
    "extract_code",
    "load_config",
]

_LAZY_EXPORTS: dict[str, str] = {
    "BackendClient": ".client",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "ConversationController": ".controllers",
    "FeedbackController": ".controllers",
    "IngestionController": ".controllers",
    "BackendConnectionError": ".exceptions",
    "BackendError": ".exceptions",
    "BackendResponseError": ".exceptions",
    "ConfigValidationError": ".exceptions",
    "RustCoderError": ".exceptions",
    "extract_code": ".parser",
    "Message": ".state",
    "SessionState": ".state",
    "SessionStore": ".state",
    "RustCoderApp": ".app",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the Textual UI optional at import time."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
