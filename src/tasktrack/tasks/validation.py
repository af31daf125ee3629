# src/tasktrack/tasks/validation.py

from __future__ import annotations

from datetime import date

from .task_models import TaskFormDraft

TITLE_MIN = 3
TITLE_MAX = 120

TITLE_REQUIRED = "Title is required."
TITLE_LENGTH = f"Title must be between {TITLE_MIN} and {TITLE_MAX} characters."
DUE_DATE_IN_PAST = "Due date cannot be in the past."

ValidationErrors = dict[str, str]


def validate_draft(draft: TaskFormDraft, today: date | None = None) -> ValidationErrors:
    """
    Validate a task form draft. Empty result means the draft can be submitted.

    Only title and due_date are checked; the other fields come from
    closed choice lists or are free text.
    """
    errors: ValidationErrors = {}

    title = (draft.title or "").strip()
    if not title:
        errors["title"] = TITLE_REQUIRED
    elif not TITLE_MIN <= len(title) <= TITLE_MAX:
        errors["title"] = TITLE_LENGTH

    if draft.due_date is not None:
        if draft.due_date < (today or date.today()):
            errors["due_date"] = DUE_DATE_IN_PAST

    return errors
