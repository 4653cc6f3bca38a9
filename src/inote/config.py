"""Configuration settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

APP_ENVS = ("development", "staging", "production")
DEFAULT_APP_ENV = "development"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    root: str
    app_env: str
    storage_key: str
    log_level: str


def get_app_env() -> str:
    """Return the application environment, falling back to development."""
    env = os.environ.get("INOTE_APP_ENV", DEFAULT_APP_ENV).lower()
    return env if env in APP_ENVS else DEFAULT_APP_ENV


def get_root_path(app_env: str | None = None) -> str:
    """Get the storage root.

    ``INOTE_ROOT`` wins when set; otherwise each environment gets its own
    directory under ``~/.inote``.
    """
    explicit = os.environ.get("INOTE_ROOT")
    if explicit:
        return explicit
    return str(Path.home() / ".inote" / (app_env or get_app_env()))


def get_settings() -> Settings:
    """Build settings from ``INOTE_*`` environment variables."""
    app_env = get_app_env()
    return Settings(
        root=get_root_path(app_env),
        app_env=app_env,
        storage_key=os.environ.get("INOTE_STORAGE_KEY", "notes"),
        log_level=os.environ.get("INOTE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
