# src/tasktrack/api/offline.py

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any

from ..core.ports import QueryParams
from ..tasks.task_models import (
    AssignableUser,
    PaginationMeta,
    StatusCounts,
    Task,
    TaskPage,
    TaskPriority,
    TaskStatus,
    parse_date,
)
from .client import ApiError

_PRIORITY_RANK = {TaskPriority.LOW.value: 0, TaskPriority.MED.value: 1, TaskPriority.HIGH.value: 2}


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class OfflineTaskApi:
    """
    In-memory task service used for demos when no API URL is configured.

    Behavior mirrors the real service closely enough for the console:
    - filters: space-separated search terms, comma lists for status/priority/tags,
      inclusive due date bounds, assigned_to substring;
    - sorting by any SortBy column, then pagination;
    - title and past-due validation answered with 400-style ApiErrors.
    """

    def __init__(self, *, owner_name: str = "demo", seed: bool = True) -> None:
        self._owner_name = owner_name
        self._tasks: dict[str, Task] = {}
        self._next_id = 1
        self._users = [AssignableUser(id="1", name=owner_name)]
        if seed:
            self._seed()

    def _seed(self) -> None:
        today = date.today()
        for title, status, priority, tags in (
            ("Write API documentation", "doing", "high", "docs,api"),
            ("Fix login bug", "todo", "high", "bug,auth"),
            ("Review pull requests", "todo", "med", "review"),
            ("Update dependencies", "done", "low", "maintenance"),
            ("Plan next sprint", "todo", "med", "planning"),
        ):
            self._insert(
                {
                    "title": title,
                    "status": status,
                    "priority": priority,
                    "tags": tags,
                    "due_date": today.isoformat(),
                }
            )

    async def aclose(self) -> None:
        return

    # ---- helpers ----

    @staticmethod
    def _validate(payload: dict[str, Any]) -> None:
        title = str(payload.get("title") or "").strip()
        if not 3 <= len(title) <= 120:
            raise ApiError(
                "server",
                "Invalid input",
                status_code=400,
                fields={"title": "Title must be between 3 and 120 characters"},
            )
        due = parse_date(payload.get("due_date"))
        if payload.get("due_date") and due is None:
            raise ApiError("server", "Invalid due date format", status_code=400)
        if due is not None and due < date.today():
            raise ApiError("server", "Due date cannot be in the past", status_code=400)

    def _insert(self, payload: dict[str, Any]) -> Task:
        now = _now_iso()
        task = Task(
            id=str(self._next_id),
            title=str(payload.get("title") or "").strip(),
            status=str(payload.get("status") or TaskStatus.TODO.value),
            priority=str(payload.get("priority") or TaskPriority.MED.value),
            description=str(payload.get("description") or ""),
            due_date=parse_date(payload.get("due_date")),
            tags=str(payload.get("tags") or ""),
            assigned_to=str(payload.get("assigned_to") or ""),
            owner_name=self._owner_name,
            created_at=now,
            updated_at=now,
        )
        self._tasks[task.id] = task
        self._next_id += 1
        return task

    def _get(self, task_id: str) -> Task:
        task = self._tasks.get(str(task_id))
        if task is None:
            raise ApiError("server", "Task not found", status_code=404)
        return task

    @staticmethod
    def _matches(task: Task, q: dict[str, str]) -> bool:
        haystack = f"{task.title} {task.description} {task.tags}".lower()
        for term in q.get("search", "").lower().split():
            if term not in haystack:
                return False

        for key, value in (("status", task.status), ("priority", task.priority)):
            wanted = [v.strip().lower() for v in q.get(key, "").split(",") if v.strip()]
            if wanted and value.lower() not in wanted:
                return False

        wanted_tags = [v.strip().lower() for v in q.get("tags", "").split(",") if v.strip()]
        if wanted_tags and not any(w in task.tags.lower() for w in wanted_tags):
            return False

        start = parse_date(q.get("due_date_start"))
        end = parse_date(q.get("due_date_end"))
        if start or end:
            if task.due_date is None:
                return False
            if start and task.due_date < start:
                return False
            if end and task.due_date > end:
                return False

        assigned = q.get("assigned_to", "").strip().lower()
        if assigned and assigned not in task.assigned_to.lower():
            return False
        return True

    @staticmethod
    def _sort_key(sort_by: str):
        if sort_by == "priority":
            return lambda t: (_PRIORITY_RANK.get(t.priority, -1), int(t.id))
        if sort_by == "title":
            return lambda t: (t.title.lower(), int(t.id))
        if sort_by == "due_date":
            return lambda t: (t.due_date or date.max, int(t.id))
        if sort_by == "updated_at":
            return lambda t: (t.updated_at, int(t.id))
        return lambda t: (t.created_at, int(t.id))

    # ---- TaskApi ----

    async def list_tasks(self, params: QueryParams) -> TaskPage:
        q: dict[str, str] = {}
        for k, v in params:
            q.setdefault(k, v)

        try:
            page = max(1, int(q.get("page", "1")))
            per_page = max(1, int(q.get("per_page", "10")))
        except ValueError:
            raise ApiError("server", "Invalid pagination parameters", status_code=400) from None

        rows = [t for t in self._tasks.values() if self._matches(t, q)]
        rows.sort(key=self._sort_key(q.get("sort_by", "created_at")), reverse=q.get("sort_order", "desc") != "asc")

        offset = (page - 1) * per_page
        return TaskPage(
            tasks=tuple(rows[offset: offset + per_page]),
            pagination=PaginationMeta(
                page=page,
                per_page=per_page,
                total=len(rows),
                total_pages=PaginationMeta.pages_for(len(rows), per_page),
            ),
        )

    async def get_stats(self) -> StatusCounts:
        statuses = [t.status for t in self._tasks.values()]
        return StatusCounts(
            todo=statuses.count(TaskStatus.TODO.value),
            doing=statuses.count(TaskStatus.DOING.value),
            done=statuses.count(TaskStatus.DONE.value),
        )

    async def list_users(self) -> list[AssignableUser]:
        return list(self._users)

    async def create_task(self, payload: dict[str, Any]) -> Task:
        self._validate(payload)
        return self._insert(payload)

    async def update_task(self, task_id: str, payload: dict[str, Any]) -> Task:
        current = self._get(task_id)
        self._validate(payload)
        updated = replace(
            current,
            title=str(payload.get("title") or "").strip(),
            description=str(payload.get("description") or ""),
            status=str(payload.get("status") or current.status),
            priority=str(payload.get("priority") or current.priority),
            due_date=parse_date(payload.get("due_date")),
            tags=str(payload.get("tags") or ""),
            assigned_to=str(payload.get("assigned_to") or ""),
            updated_at=_now_iso(),
        )
        self._tasks[updated.id] = updated
        return updated

    async def delete_task(self, task_id: str) -> None:
        self._get(task_id)
        del self._tasks[str(task_id)]
