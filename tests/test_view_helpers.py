# tests/test_view_helpers.py

from __future__ import annotations

from datetime import date

from tasktrack.tasks.task_models import PaginationMeta
from tasktrack.tasks.view_helpers import (
    GRAY,
    RED,
    UNKNOWN,
    format_due_date,
    priority_category,
    render_task_list,
    status_category,
    task_clipboard_text,
)

from .fakes import make_task


def test_status_categories() -> None:
    assert status_category("todo").icon == "circle"
    assert status_category("doing").icon == "play"
    done = status_category("done")
    assert done.icon == "check-circle"
    assert "green" in done.color_class


def test_priority_categories() -> None:
    assert priority_category("high").color_class == RED
    assert priority_category("med").kind == "med"
    assert "green" in priority_category("low").color_class


def test_unknown_values_fall_back_to_neutral_category() -> None:
    for value in ("blocked", "", None, 3):
        s = status_category(value)
        p = priority_category(value)
        assert s.kind == UNKNOWN and s.color_class == GRAY
        assert p.kind == UNKNOWN and p.color_class == GRAY


def test_clipboard_text_and_due_date() -> None:
    task = make_task(7, "Write docs", description="API section", due_date=date(2025, 8, 22))
    assert task_clipboard_text(task) == "Title: Write docs\nDescription: API section"
    assert task_clipboard_text(make_task(8, "No desc")) == "Title: No desc\nDescription: "
    assert format_due_date(task) == "22 Aug 2025"


def test_render_task_list_handles_empty_page() -> None:
    assert render_task_list((), PaginationMeta()) == "No tasks match the current filters."
    text = render_task_list((make_task(1, "One", status="weird"),), PaginationMeta(total=1))
    assert "[?]" not in text
    assert "#1 One" in text
    assert "Page 1 of 1 (1 tasks)" in text
