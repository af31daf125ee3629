# src/tasktrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task-list engine.

The engine depends on Protocols instead of concrete implementations.
This keeps the REST transport, the toast surface and the address bar swappable
and makes testing easier.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Literal, Protocol

from ..tasks.task_models import AssignableUser, StatusCounts, Task, TaskPage

QueryParams = list[tuple[str, str]]
# Ordered GET /tasks parameters, as produced by query.codec.request_params().

NotificationVariant = Literal["default", "destructive"]


@dataclass(slots=True, frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: NotificationVariant = "default"


class TaskApi(Protocol):
    """
    Remote task service.

    Implementations raise api.client.ApiError for transport and server failures.
    """

    def list_tasks(self, params: QueryParams) -> Awaitable[TaskPage]: ...
    def get_stats(self) -> Awaitable[StatusCounts]: ...
    def list_users(self) -> Awaitable[list[AssignableUser]]: ...
    def create_task(self, payload: dict[str, Any]) -> Awaitable[Task]: ...
    def update_task(self, task_id: str, payload: dict[str, Any]) -> Awaitable[Task]: ...
    def delete_task(self, task_id: str) -> Awaitable[None]: ...
    def aclose(self) -> Awaitable[None]: ...


class Notifier(Protocol):
    """Transient user-facing notifications (toasts)."""

    def notify(self, notification: Notification) -> None: ...


class QueryStringSink(Protocol):
    """
    Where the canonical query string is persisted (browser address bar, CLI prompt, ...).
    """

    def write(self, query_string: str) -> None: ...
