# tests/fakes.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from tasktrack.api.client import ApiError
from tasktrack.core.ports import Notification, QueryParams
from tasktrack.tasks.task_models import (
    AssignableUser,
    PaginationMeta,
    StatusCounts,
    Task,
    TaskPage,
)


def make_task(task_id: int | str, title: str = "Task", **kw: Any) -> Task:
    return Task(
        id=str(task_id),
        title=title,
        status=kw.pop("status", "todo"),
        priority=kw.pop("priority", "med"),
        **kw,
    )


class FakeTaskApi:
    """
    Deterministic TaskApi for unit tests.

    - Captures every call for assertions
    - list_tasks answers immediately from `tasks`, or, with manual=True,
      parks each call on a Future so tests can resolve fetches out of order
    - *_error attributes make the matching call raise
    """

    def __init__(self, tasks: list[Task] | None = None, *, manual: bool = False) -> None:
        self.tasks = list(tasks or [])
        self.manual = manual
        self.counts = StatusCounts(todo=2, doing=1, done=3)
        self.users = [AssignableUser(id="1", name="Ana"), AssignableUser(id="2", name="Ben")]

        self.list_calls: list[QueryParams] = []
        self.pending: list[asyncio.Future[TaskPage]] = []
        self.stats_calls = 0
        self.created: list[dict[str, Any]] = []
        self.updated: list[tuple[str, dict[str, Any]]] = []
        self.deleted: list[str] = []

        self.list_error: Exception | None = None
        self.stats_error: Exception | None = None
        self.save_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.closed = False

    def page_for(self, params: QueryParams) -> TaskPage:
        q = dict(params)
        page = int(q.get("page", "1"))
        per_page = int(q.get("per_page", "10"))
        offset = (page - 1) * per_page
        return TaskPage(
            tasks=tuple(self.tasks[offset: offset + per_page]),
            pagination=PaginationMeta(
                page=page,
                per_page=per_page,
                total=len(self.tasks),
                total_pages=PaginationMeta.pages_for(len(self.tasks), per_page),
            ),
        )

    async def list_tasks(self, params: QueryParams) -> TaskPage:
        self.list_calls.append(list(params))
        if self.manual:
            fut: asyncio.Future[TaskPage] = asyncio.get_running_loop().create_future()
            self.pending.append(fut)
            return await fut
        if self.list_error is not None:
            raise self.list_error
        return self.page_for(params)

    async def get_stats(self) -> StatusCounts:
        self.stats_calls += 1
        if self.stats_error is not None:
            raise self.stats_error
        return self.counts

    async def list_users(self) -> list[AssignableUser]:
        return list(self.users)

    async def create_task(self, payload: dict[str, Any]) -> Task:
        if self.save_error is not None:
            raise self.save_error
        self.created.append(payload)
        task = make_task(100 + len(self.created), payload["title"])
        self.tasks.insert(0, task)
        return task

    async def update_task(self, task_id: str, payload: dict[str, Any]) -> Task:
        if self.save_error is not None:
            raise self.save_error
        self.updated.append((task_id, payload))
        return make_task(task_id, payload["title"])

    async def delete_task(self, task_id: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(task_id)
        self.tasks = [t for t in self.tasks if t.id != task_id]

    async def aclose(self) -> None:
        self.closed = True


def server_error(message: str = "", status_code: int = 400) -> ApiError:
    return ApiError("server", message, status_code=status_code)


@dataclass(slots=True)
class RecordingNotifier:
    """Notifier that keeps every notification for assertions."""

    sent: list[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.sent.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.sent]


@dataclass(slots=True)
class RecordingSink:
    """QueryStringSink standing in for the browser address bar."""

    written: list[str] = field(default_factory=list)

    def write(self, query_string: str) -> None:
        self.written.append(query_string)

    @property
    def current(self) -> str | None:
        return self.written[-1] if self.written else None
