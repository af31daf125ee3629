# src/tasktrack/tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    TODO = "todo"
    DOING = "doing"
    DONE = "done"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class TaskPriority(StrEnum):
    LOW = "low"
    MED = "med"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str | None) -> TaskPriority | None:
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


def parse_date(raw: Any) -> date | None:
    """
    Best-effort calendar date from API/query input.

    Accepts date objects, "YYYY-MM-DD" and RFC3339 timestamps
    ("2025-08-22T23:59:59Z"); only the date part is kept.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if len(s) < 10:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


@dataclass(slots=True, frozen=True)
class Task:
    """
    A task as returned by the API.

    status/priority keep the raw server string: an unexpected value must still
    render (as the neutral category) instead of failing the whole page.
    """

    id: str
    title: str
    status: str
    priority: str
    description: str = ""
    due_date: date | None = None
    tags: str = ""
    assigned_to: str = ""
    owner_name: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def tag_list(self) -> list[str]:
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title") or ""),
            status=str(data.get("status") or ""),
            priority=str(data.get("priority") or ""),
            description=str(data.get("description") or ""),
            due_date=parse_date(data.get("due_date")),
            tags=str(data.get("tags") or ""),
            assigned_to=str(data.get("assigned_to") or ""),
            owner_name=data.get("owner_name") or None,
            created_at=str(data.get("created_at") or ""),
            updated_at=str(data.get("updated_at") or ""),
        )


@dataclass(slots=True, frozen=True)
class PaginationMeta:
    page: int = 1
    per_page: int = 10
    total: int = 0
    total_pages: int = 1

    @staticmethod
    def pages_for(total: int, per_page: int) -> int:
        if per_page < 1:
            return 1
        return max(1, math.ceil(total / per_page))

    @classmethod
    def from_payload(cls, data: dict[str, Any], *, fallback_page: int, fallback_per_page: int) -> PaginationMeta:
        def _int(name: str, default: int) -> int:
            try:
                return int(data.get(name, default))
            except (TypeError, ValueError):
                return default

        page = max(1, _int("page", fallback_page))
        per_page = max(1, _int("per_page", fallback_per_page))
        total = max(0, _int("total", 0))
        # The server reports 0 pages for an empty result; the view always has page 1.
        return cls(page=page, per_page=per_page, total=total, total_pages=cls.pages_for(total, per_page))


@dataclass(slots=True, frozen=True)
class StatusCounts:
    todo: int = 0
    doing: int = 0
    done: int = 0

    @property
    def total(self) -> int:
        return self.todo + self.doing + self.done

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> StatusCounts:
        def _int(name: str) -> int:
            try:
                return max(0, int(data.get(name) or 0))
            except (TypeError, ValueError):
                return 0

        return cls(todo=_int("todo"), doing=_int("doing"), done=_int("done"))


@dataclass(slots=True, frozen=True)
class AssignableUser:
    id: str
    name: str

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> AssignableUser:
        return cls(id=str(data.get("id", "")), name=str(data.get("name") or ""))


@dataclass(slots=True, frozen=True)
class TaskPage:
    tasks: tuple[Task, ...]
    pagination: PaginationMeta


UNASSIGNED = "unassigned"


@dataclass(slots=True)
class TaskFormDraft:
    """Editable copy of a task while the editor is open."""

    title: str = ""
    description: str = ""
    status: str = TaskStatus.TODO.value
    priority: str = TaskPriority.MED.value
    due_date: date | None = None
    tags: str = ""
    assigned_to: str = UNASSIGNED

    @classmethod
    def from_task(cls, task: Task) -> TaskFormDraft:
        return cls(
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            tags=task.tags,
            assigned_to=task.assigned_to or UNASSIGNED,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "due_date": f"{self.due_date.isoformat()}T00:00:00.000Z" if self.due_date else None,
            "tags": self.tags,
            "assigned_to": "" if self.assigned_to == UNASSIGNED else self.assigned_to,
        }
