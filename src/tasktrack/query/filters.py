# src/tasktrack/query/filters.py

"""
FilterSet: the complete, immutable description of a task-list view.

A FilterSet is a plain value. Absent filters are None; the store and codec
never keep the "no-op" UI sentinels ("", "all", "unassigned") in it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum
from typing import Any

from ..tasks.task_models import TaskPriority, TaskStatus, parse_date


class SortBy(StrEnum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


NOOP_VALUES = frozenset({"", "all", "unassigned"})

# Free-text and enum filters, in canonical order.
FILTER_KEYS: tuple[str, ...] = (
    "search",
    "status",
    "priority",
    "tags",
    "due_date_start",
    "due_date_end",
    "assigned_to",
)
PAGING_KEYS: tuple[str, ...] = ("page", "per_page", "sort_by", "sort_order")
ALL_KEYS: tuple[str, ...] = FILTER_KEYS + PAGING_KEYS


def is_noop(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in NOOP_VALUES
    return False


@dataclass(slots=True, frozen=True)
class FilterDefaults:
    """Values a fresh session starts from (per_page is configuration)."""

    per_page: int = 10
    sort_by: SortBy = SortBy.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        if self.per_page < 1:
            raise ValueError(f"default per_page must be positive, got {self.per_page}")


@dataclass(slots=True, frozen=True)
class FilterSet:
    search: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    tags: str | None = None
    due_date_start: date | None = None
    due_date_end: date | None = None
    assigned_to: str | None = None
    sort_by: SortBy = SortBy.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = 1
    per_page: int = 10

    @classmethod
    def defaults(cls, defaults: FilterDefaults | None = None) -> FilterSet:
        d = defaults or FilterDefaults()
        return cls(per_page=d.per_page, sort_by=d.sort_by, sort_order=d.sort_order)

    def active_filters(self) -> dict[str, Any]:
        """Filters that are set, in canonical order."""
        out: dict[str, Any] = {}
        for key in FILTER_KEYS:
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out

    def with_value(self, key: str, value: Any, defaults: FilterDefaults | None = None) -> FilterSet:
        """
        Return a copy with `key` set to `value` (coerced and validated).

        Sentinels remove a filter, or reset a paging key to its default.
        Raises ValueError for unknown keys or values outside the key's domain.
        """
        d = defaults or FilterDefaults()
        if key not in ALL_KEYS:
            raise ValueError(f"Unknown filter key: {key!r}")

        if is_noop(value):
            reset: dict[str, Any] = {
                "page": 1,
                "per_page": d.per_page,
                "sort_by": d.sort_by,
                "sort_order": d.sort_order,
            }
            return replace(self, **{key: reset.get(key)})

        return replace(self, **{key: coerce_value(key, value)})


def coerce_value(key: str, value: Any) -> Any:
    """Convert a user/query value into the typed FilterSet field value."""
    if key in ("search", "tags", "assigned_to"):
        text = str(value).strip()
        if not text:
            raise ValueError(f"{key} must not be blank")
        return text

    if key == "status":
        status = TaskStatus.parse(str(value))
        if status is None:
            raise ValueError(f"Invalid status: {value!r}")
        return status

    if key == "priority":
        priority = TaskPriority.parse(str(value))
        if priority is None:
            raise ValueError(f"Invalid priority: {value!r}")
        return priority

    if key in ("due_date_start", "due_date_end"):
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"Invalid date for {key}: {value!r}")
        return parsed

    if key in ("page", "per_page"):
        if isinstance(value, bool):
            raise ValueError(f"{key} must be an integer")
        try:
            number = int(str(value).strip()) if not isinstance(value, int) else value
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}") from None
        if number < 1:
            raise ValueError(f"{key} must be >= 1, got {number}")
        return number

    if key == "sort_by":
        try:
            return SortBy(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid sort_by: {value!r}") from None

    if key == "sort_order":
        try:
            return SortOrder(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid sort_order: {value!r}") from None

    raise ValueError(f"Unknown filter key: {key!r}")