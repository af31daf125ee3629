# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktrack.cli.bootstrap import create_initial_state
from tasktrack.core.dashboard import TaskDashboard
from tasktrack.core.state import AppState

from .fakes import FakeTaskApi, RecordingNotifier, RecordingSink, make_task

TODAY = date(2026, 3, 15)

# Short enough to keep the suite fast, long enough that a few awaits between
# filter changes still land inside one debounce window.
DEBOUNCE_S = 0.2


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasktrack-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        api_base_url="",
        api_token=None,
        is_admin=False,
        http_connect_timeout_seconds=1.0,
        http_read_timeout_seconds=1.0,
        debounce_seconds=DEBOUNCE_S,
        default_per_page=10,
        start_query="",
        offline=True,
    )


@pytest.fixture()
def api() -> FakeTaskApi:
    return FakeTaskApi([make_task(i, f"Task {i}") for i in range(1, 36)])


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def dashboard(api: FakeTaskApi, notifier: RecordingNotifier, sink: RecordingSink) -> TaskDashboard:
    return TaskDashboard(api, notifier, sink, debounce_seconds=DEBOUNCE_S, today=lambda: TODAY)


@pytest.fixture()
def state(settings: SimpleNamespace, api: FakeTaskApi, notifier: RecordingNotifier, sink: RecordingSink) -> AppState:
    """AppState wired through the real bootstrap with deterministic fakes."""
    return create_initial_state(notifier=notifier, sink=sink, settings=settings, api=api)
