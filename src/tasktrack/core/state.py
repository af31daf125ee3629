# src/tasktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .dashboard import TaskDashboard
from .ports import Notifier, TaskApi


@dataclass
class AppState:
    # Settings object (config.Settings or a test stand-in with the same attributes).
    settings: object

    api: TaskApi
    notifier: Notifier
    dashboard: TaskDashboard
