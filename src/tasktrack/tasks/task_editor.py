# src/tasktrack/tasks/task_editor.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import fields, replace
from datetime import date
from typing import Any

from ..api.client import friendly_api_error_message
from ..core.ports import Notification, Notifier, TaskApi
from .task_models import UNASSIGNED, Task, TaskFormDraft, TaskPriority, TaskStatus, parse_date
from .validation import ValidationErrors, validate_draft

logger = logging.getLogger(__name__)

DRAFT_FIELDS = frozenset(f.name for f in fields(TaskFormDraft))

SavedCallback = Callable[[Task], Awaitable[None]]


class TaskEditor:
    """
    The create/edit task modal.

    Owns the TaskFormDraft while open. Errors are recomputed on every change;
    submit() never reaches the network while errors exist. A failed submission
    keeps the editor open with the draft untouched.
    """

    def __init__(
            self,
            api: TaskApi,
            notifier: Notifier,
            *,
            on_saved: SavedCallback | None = None,
            today: Callable[[], date] = date.today,
    ) -> None:
        self._api = api
        self._notifier = notifier
        self._on_saved = on_saved
        self._today = today

        self._draft: TaskFormDraft | None = None
        self._editing: Task | None = None
        self._errors: ValidationErrors = {}
        self._submitting = False

    @property
    def is_open(self) -> bool:
        return self._draft is not None

    @property
    def editing(self) -> Task | None:
        return self._editing

    @property
    def draft(self) -> TaskFormDraft | None:
        return self._draft

    @property
    def errors(self) -> ValidationErrors:
        return dict(self._errors)

    @property
    def can_submit(self) -> bool:
        return self.is_open and not self._errors and not self._submitting

    def open(self, task: Task | None = None) -> TaskFormDraft:
        # Edits start from a copy; the list's Task is never mutated.
        self._editing = task
        self._draft = TaskFormDraft.from_task(task) if task is not None else TaskFormDraft()
        self._revalidate()
        return self._draft

    def cancel(self) -> None:
        self._draft = None
        self._editing = None
        self._errors = {}

    def update(self, field: str, value: Any) -> ValidationErrors:
        """Change one draft field and return the recomputed errors."""
        return self.update_many({field: value})

    def update_many(self, values: dict[str, Any]) -> ValidationErrors:
        if self._draft is None:
            raise ValueError("No task form is open")

        changes = {name: _coerce_field(name, value) for name, value in values.items()}
        self._draft = replace(self._draft, **changes)
        self._revalidate()
        return self.errors

    async def submit(self) -> Task | None:
        """
        Create or update the task. Returns the saved Task, or None when the
        submission was blocked or failed (the reason was notified).
        """
        if self._draft is None:
            raise ValueError("No task form is open")

        self._revalidate()
        if self._errors:
            self._notifier.notify(
                Notification(
                    title="Invalid form",
                    description="Please fix the errors before saving.",
                    variant="destructive",
                )
            )
            return None

        if self._submitting:
            return None

        payload = self._draft.to_payload()
        editing = self._editing
        self._submitting = True
        try:
            if editing is not None:
                saved = await self._api.update_task(editing.id, payload)
                self._notifier.notify(Notification(title="Task updated", description=f"'{saved.title}' was saved."))
            else:
                saved = await self._api.create_task(payload)
                self._notifier.notify(Notification(title="Task created", description=f"'{saved.title}' was added."))
        except Exception as e:
            logger.info("Saving task failed: %s", e)
            self._notifier.notify(
                Notification(
                    title="Error",
                    description=friendly_api_error_message(e, "Error saving task"),
                    variant="destructive",
                )
            )
            return None
        finally:
            self._submitting = False

        logger.info("Task %s %s", saved.id, "updated" if editing is not None else "created")
        self.cancel()
        if self._on_saved is not None:
            await self._on_saved(saved)
        return saved

    def _revalidate(self) -> None:
        self._errors = validate_draft(self._draft, self._today()) if self._draft is not None else {}


def _coerce_field(name: str, value: Any) -> Any:
    if name not in DRAFT_FIELDS:
        raise ValueError(f"Unknown task field: {name!r}")

    if name == "due_date":
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"Invalid due date: {value!r}")
        return parsed

    if name == "status":
        status = TaskStatus.parse(str(value))
        if status is None:
            raise ValueError(f"Invalid status: {value!r}")
        return status.value

    if name == "priority":
        priority = TaskPriority.parse(str(value))
        if priority is None:
            raise ValueError(f"Invalid priority: {value!r}")
        return priority.value

    if name == "assigned_to":
        text = "" if value is None else str(value).strip()
        return text or UNASSIGNED

    return "" if value is None else str(value)
