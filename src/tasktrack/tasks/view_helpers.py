# src/tasktrack/tasks/view_helpers.py

from __future__ import annotations

from dataclasses import dataclass

from .task_models import PaginationMeta, StatusCounts, Task, TaskPriority, TaskStatus

GRAY = "bg-gray-500/20 text-gray-400 border-gray-500/50"
BLUE = "bg-blue-500/20 text-blue-400 border-blue-500/50"
GREEN = "bg-green-500/20 text-green-400 border-green-500/50"
YELLOW = "bg-yellow-500/20 text-yellow-400 border-yellow-500/50"
RED = "bg-red-500/20 text-red-400 border-red-500/50"

UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class StatusCategory:
    kind: str
    icon: str
    color_class: str


@dataclass(slots=True, frozen=True)
class PriorityCategory:
    kind: str
    color_class: str


_STATUS: dict[str, StatusCategory] = {
    TaskStatus.TODO: StatusCategory(kind="todo", icon="circle", color_class=GRAY),
    TaskStatus.DOING: StatusCategory(kind="doing", icon="play", color_class=BLUE),
    TaskStatus.DONE: StatusCategory(kind="done", icon="check-circle", color_class=GREEN),
}
_STATUS_UNKNOWN = StatusCategory(kind=UNKNOWN, icon="circle", color_class=GRAY)

_PRIORITY: dict[str, PriorityCategory] = {
    TaskPriority.HIGH: PriorityCategory(kind="high", color_class=RED),
    TaskPriority.MED: PriorityCategory(kind="med", color_class=YELLOW),
    TaskPriority.LOW: PriorityCategory(kind="low", color_class=GREEN),
}
_PRIORITY_UNKNOWN = PriorityCategory(kind=UNKNOWN, color_class=GRAY)


def status_category(status: object) -> StatusCategory:
    if not isinstance(status, str):
        return _STATUS_UNKNOWN
    return _STATUS.get(status.strip().lower(), _STATUS_UNKNOWN)


def priority_category(priority: object) -> PriorityCategory:
    if not isinstance(priority, str):
        return _PRIORITY_UNKNOWN
    return _PRIORITY.get(priority.strip().lower(), _PRIORITY_UNKNOWN)


def format_due_date(task: Task) -> str:
    if task.due_date is None:
        return ""
    return task.due_date.strftime("%d %b %Y")


def task_clipboard_text(task: Task) -> str:
    return f"Title: {task.title}\nDescription: {task.description or ''}"


def pagination_label(meta: PaginationMeta) -> str:
    return f"Page {meta.page} of {meta.total_pages} ({meta.total} tasks)"


_ICON_GLYPHS = {"circle": "[ ]", "play": "[>]", "check-circle": "[x]"}


def render_task_line(task: Task) -> str:
    status = status_category(task.status)
    priority = priority_category(task.priority)
    glyph = _ICON_GLYPHS.get(status.icon, "[?]")

    parts = [f"{glyph} #{task.id} {task.title}", f"({priority.kind})"]
    due = format_due_date(task)
    if due:
        parts.append(f"due {due}")
    if task.tag_list:
        parts.append("tags: " + ", ".join(task.tag_list))
    if task.assigned_to:
        parts.append(f"-> {task.assigned_to}")
    if task.owner_name:
        parts.append(f"owner: {task.owner_name}")
    return "  ".join(parts)


def render_task_list(tasks: tuple[Task, ...] | list[Task], meta: PaginationMeta) -> str:
    if not tasks:
        return "No tasks match the current filters."
    lines = [render_task_line(t) for t in tasks]
    lines.append(pagination_label(meta))
    return "\n".join(lines)


def render_counts(counts: StatusCounts) -> str:
    return f"todo: {counts.todo}  doing: {counts.doing}  done: {counts.done}  total: {counts.total}"
