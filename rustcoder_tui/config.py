"""Configuration loading and validation for the Rust Coder TUI."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from platformdirs import user_config_path
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigValidationError

import tomllib

LOGGER = logging.getLogger(__name__)

APP_NAME = "rustcoder-tui"
CONFIG_DIR = user_config_path(APP_NAME)
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _required_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata and background check cadence."""

    title: str = "Rust Coder AI"
    connection_check_interval_seconds: int = Field(default=15, ge=1, le=3600)

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return _required_string(value)


class BackendConfig(BaseModel):
    """Where the knowledge base and code-generation API lives."""

    base_url: str = "http://127.0.0.1:3000"
    timeout: int = Field(default=120, ge=1, le=3600)
    text_ingest_path: str = "/api/ingest/text"

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        return _required_string(value).rstrip("/")

    @field_validator("text_ingest_path", mode="before")
    @classmethod
    def _validate_path(cls, value: Any) -> str:
        normalized = _required_string(value)
        if not normalized.startswith("/"):
            raise ValueError("text_ingest_path must start with '/'.")
        return normalized


class UIConfig(BaseModel):
    """Rendering preferences."""

    show_timestamps: bool = True
    code_language: str = "rust"

    @field_validator("code_language", mode="before")
    @classmethod
    def _validate_language(cls, value: Any) -> str:
        return _required_string(value).lower()


class KeybindsConfig(BaseModel):
    """Key bound to each app action."""

    send_query: str = "ctrl+enter"
    ingest_text: str = "ctrl+t"
    ingest_file: str = "ctrl+u"
    browse_file: str = "ctrl+o"
    copy_last_code: str = "ctrl+y"
    shutdown_backend: str = "ctrl+x"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Key binding must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("Key binding must not be blank.")
        return normalized


class SecurityConfig(BaseModel):
    """Security policy for remote backend access."""

    allow_remote_hosts: bool = False
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "::1"]

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def _validate_allowed_hosts(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            raise ValueError("allowed_hosts must be a list of host names.")
        normalized_hosts = [
            item.strip().lower()
            for item in value
            if isinstance(item, str) and item.strip()
        ]
        if not normalized_hosts:
            raise ValueError("allowed_hosts must name at least one host.")
        return normalized_hosts


class LoggingConfig(BaseModel):
    """Log level, format and optional log file."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/rustcoder-tui/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        return _required_string(value)


class Config(BaseModel):
    """All configuration sections plus the backend host policy."""

    app: AppConfig = AppConfig()
    backend: BackendConfig = BackendConfig()
    ui: UIConfig = UIConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    security: SecurityConfig = SecurityConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _validate_security_policy(self) -> Config:
        parsed = urlparse(self.backend.base_url)
        scheme = parsed.scheme.lower()
        hostname = (parsed.hostname or "").strip().lower()

        if scheme not in {"http", "https"}:
            raise ValueError("backend.base_url must use http or https scheme.")
        if not hostname:
            raise ValueError("backend.base_url must include a hostname.")
        if not self.security.allow_remote_hosts and hostname not in set(
            self.security.allowed_hosts
        ):
            raise ValueError(
                "backend.base_url is not in security.allowed_hosts while allow_remote_hosts is false."
            )
        return self


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Create the config directory if needed and return it."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Could not create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge nested ``override`` tables onto a copy of ``base``."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Restrict the config file to its owner where the platform allows it."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Could not restrict permissions of %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Return the validated config, or the defaults if any value is invalid."""
    try:
        return Config.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning("Invalid configuration, falling back to defaults: %s", exc)
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001
        raise ConfigValidationError(f"Configuration could not be validated: {exc}") from exc


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    ``overrides`` (for example CLI flags) are merged on top of the file
    before validation, so they obey the same security policy.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable config %s: %s", target_path, exc)
            raw_data = {}

    merged = _deep_merge(DEFAULT_CONFIG, raw_data)
    if overrides:
        merged = _deep_merge(merged, overrides)
    return _validate_config(merged)
