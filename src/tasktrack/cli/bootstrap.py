# src/tasktrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- picks the task API (HTTP when TASKTRACK_API_BASE_URL is set, offline demo otherwise),
- wires the dashboard into AppState.
"""

from __future__ import annotations

import logging

from ..api.client import HttpTaskApi, build_timeout
from ..api.offline import OfflineTaskApi
from ..config import get_settings
from ..core.dashboard import TaskDashboard
from ..core.ports import Notifier, QueryStringSink, TaskApi
from ..core.state import AppState
from ..query.filters import FilterDefaults

logger = logging.getLogger(__name__)


def create_api(settings) -> TaskApi:
    if settings.offline:
        logger.info("No API base URL configured; using the offline demo API.")
        return OfflineTaskApi(owner_name=settings.app_name)

    return HttpTaskApi(
        settings.api_base_url,
        token=settings.api_token,
        timeout=build_timeout(settings.http_connect_timeout_seconds, settings.http_read_timeout_seconds),
    )


def create_initial_state(
    *,
    notifier: Notifier,
    sink: QueryStringSink | None = None,
    settings=None,
    api: TaskApi | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the API) injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    if api is None:
        api = create_api(settings)

    dashboard = TaskDashboard(
        api,
        notifier,
        sink,
        defaults=FilterDefaults(per_page=settings.default_per_page),
        initial_query=settings.start_query,
        debounce_seconds=settings.debounce_seconds,
        is_admin=settings.is_admin,
    )
    return AppState(settings=settings, api=api, notifier=notifier, dashboard=dashboard)
