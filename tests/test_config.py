# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from tasktrack.config import Settings

_VARS = (
    "APP_NAME",
    "LOG_LEVEL",
    "DATA_DIR",
    "API_BASE_URL",
    "API_TOKEN",
    "IS_ADMIN",
    "DEBOUNCE_MS",
    "DEFAULT_PER_PAGE",
    "HTTP_CONNECT_TIMEOUT_SECONDS",
    "HTTP_READ_TIMEOUT_SECONDS",
    "START_QUERY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(f"TASKTRACK_{name}", raising=False)


def test_defaults_select_offline_demo() -> None:
    s = Settings.from_env()
    assert s.offline is True
    assert s.api_token is None
    assert s.debounce_seconds == 0.5
    assert s.default_per_page == 10
    assert s.http_read_timeout_seconds == 30.0
    assert s.data_dir == Path(".local/tasktrack")


def test_values_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKTRACK_API_BASE_URL", " https://tasks.example.com/api ")
    monkeypatch.setenv("TASKTRACK_API_TOKEN", "abc")
    monkeypatch.setenv("TASKTRACK_IS_ADMIN", "yes")
    monkeypatch.setenv("TASKTRACK_DEBOUNCE_MS", "250")
    monkeypatch.setenv("TASKTRACK_DEFAULT_PER_PAGE", "25")
    monkeypatch.setenv("TASKTRACK_HTTP_READ_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("TASKTRACK_START_QUERY", "status=todo")

    s = Settings.from_env()
    assert s.offline is False
    assert s.api_base_url == "https://tasks.example.com/api"
    assert s.api_token == "abc"
    assert s.is_admin is True
    assert s.debounce_seconds == 0.25
    assert s.default_per_page == 25
    assert s.http_read_timeout_seconds is None
    assert s.start_query == "status=todo"


def test_malformed_numbers_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKTRACK_DEBOUNCE_MS", "soon")
    monkeypatch.setenv("TASKTRACK_DEFAULT_PER_PAGE", "0")
    monkeypatch.setenv("TASKTRACK_HTTP_CONNECT_TIMEOUT_SECONDS", "fast")

    s = Settings.from_env()
    assert s.debounce_ms == 500
    assert s.default_per_page == 10
    assert s.http_connect_timeout_seconds == 5.0
