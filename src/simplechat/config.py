"""Configuration loading and validation for the SimpleChat client."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
import tomllib
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigValidationError
from .formatting import CONVERSATION_STARTERS

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "simplechat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _non_empty_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata and welcome-screen content."""

    title: str = "SimpleChat"
    starters: list[str] = Field(default_factory=lambda: list(CONVERSATION_STARTERS))

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return _non_empty_string(value)

    @field_validator("starters", mode="before")
    @classmethod
    def _validate_starters(cls, value: Any) -> list[str]:
        if value is None:
            return list(CONVERSATION_STARTERS)
        if not isinstance(value, list):
            raise ValueError("starters must be a list of strings.")
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class AgentConfig(BaseModel):
    """Which agent answers, and how to reach it."""

    backend: Literal["http", "ollama"] = "http"
    agent_id: str = "69942cebc194d78a6a0240a4"
    endpoint: str = "http://localhost:3000/api/agent"
    api_key: str = ""
    timeout: int = Field(default=120, ge=1, le=3600)
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    system_prompt: str = "You are a helpful assistant."
    max_history_messages: int = Field(default=200, ge=1, le=100_000)
    max_context_tokens: int = Field(default=4096, ge=128, le=1_000_000)

    @field_validator("agent_id", "endpoint", "ollama_host", "ollama_model", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _non_empty_string(value)

    @field_validator("api_key", "system_prompt", mode="before")
    @classmethod
    def _normalize_optional_string(cls, value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        return value.strip()

    @model_validator(mode="after")
    def _validate_urls(self) -> AgentConfig:
        for name in ("endpoint", "ollama_host"):
            parsed = urlparse(getattr(self, name))
            if parsed.scheme.lower() not in {"http", "https"}:
                raise ValueError(f"agent.{name} must use http or https scheme.")
            if not parsed.hostname:
                raise ValueError(f"agent.{name} must include a hostname.")
        return self


class StorageConfig(BaseModel):
    """Where conversations and the user identity are kept."""

    enabled: bool = True
    path: str = "~/.local/state/simplechat/storage.json"
    conversations_key: str = "simplechat_conversations"
    user_id_key: str = "simplechat_user_id"

    @field_validator("path", "conversations_key", "user_id_key", mode="before")
    @classmethod
    def _validate_string(cls, value: Any) -> str:
        return _non_empty_string(value)


class UIConfig(BaseModel):
    """Display preferences."""

    show_timestamps: bool = True
    sidebar_preview_length: int = Field(default=50, ge=10, le=500)


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/simplechat/app.log"

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
        return _non_empty_string(value)


class Config(BaseModel):
    """Root configuration model for all sections."""

    app: AppConfig = AppConfig()
    agent: AgentConfig = AgentConfig()
    storage: StorageConfig = StorageConfig()
    ui: UIConfig = UIConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fall back to safe defaults when possible."""
    try:
        return Config.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except Exception as exc:  # noqa: BLE001 - we must not crash on invalid user config.
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))
