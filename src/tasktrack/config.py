# src/tasktrack/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (an empty API URL selects the offline demo API).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTRACK"

load_dotenv(override=False)


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


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


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
    data_dir: Path

    # ---- Remote API ----
    api_base_url: str
    api_token: str | None
    is_admin: bool
    http_connect_timeout_seconds: float
    # None disables the read timeout.
    http_read_timeout_seconds: float | None

    # ---- Task list ----
    debounce_ms: int
    default_per_page: int
    start_query: str

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def offline(self) -> bool:
        return not self.api_base_url.strip()

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasktrack").strip() or "tasktrack"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasktrack"))

        api_base_url = _env(_k("API_BASE_URL"), "").strip()
        api_token = _env(_k("API_TOKEN"), "").strip() or None
        is_admin = _env_bool(_k("IS_ADMIN"), False)

        connect_timeout = _env_float(_k("HTTP_CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("HTTP_READ_TIMEOUT_SECONDS"), 30.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            api_base_url=api_base_url,
            api_token=api_token,
            is_admin=is_admin,
            http_connect_timeout_seconds=max(0.1, connect_timeout),
            http_read_timeout_seconds=read_timeout if read_timeout > 0 else None,
            debounce_ms=_env_int(_k("DEBOUNCE_MS"), 500, minimum=0),
            default_per_page=_env_int(_k("DEFAULT_PER_PAGE"), 10, minimum=1),
            start_query=_env(_k("START_QUERY"), "").strip(),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
