# src/meeting_planner/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time: every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "MEETINGS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Reminders ----
    reminders_enabled: bool
    reminder_interval_seconds: float

    # ---- Local paths (ignored by git) ----
    data_dir: Path
    export_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "meetings").strip() or "meetings"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        reminders_enabled = _env_bool(_k("REMINDERS_ENABLED"), True)
        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 30.0)
        if reminder_interval_seconds <= 0:
            reminder_interval_seconds = 30.0

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/meetings"))
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            reminders_enabled=reminders_enabled,
            reminder_interval_seconds=reminder_interval_seconds,
            data_dir=data_dir,
            export_dir=export_dir,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings; .env is loaded on first use, never overriding real env vars."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
