# src/tasktrack/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.state import AppState
from ..query.filters import ALL_KEYS
from ..tasks.task_editor import TaskEditor
from ..tasks.view_helpers import render_counts, render_task_list, task_clipboard_text

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str | Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /search, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Handlers may be plain functions or coroutines. ValueError raised by a
        handler is a user input problem and is reported as the reply.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            result = handler(state, args, emit)
            if inspect.isawaitable(result):
                result = await result
        except ValueError as e:
            return f"Error: {e}"
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def parse_assignments(args: list[str]) -> dict[str, str]:
    """["title=Fix bug", "priority=high"] -> {"title": "Fix bug", "priority": "high"}"""
    out: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected field=value, got {arg!r}")
        out[key.strip()] = value
    return out


def describe_filters(state: AppState) -> str:
    qs = state.dashboard.query_string
    return f"Filters: {qs}" if qs else "Filters: (defaults)"


def render_form(editor: TaskEditor) -> str:
    draft = editor.draft
    if draft is None:
        return "No task form is open. Use /new or /edit <id>."

    header = f"Editing task #{editor.editing.id}" if editor.editing is not None else "New task"
    due = draft.due_date.isoformat() if draft.due_date else "-"
    lines = [
        f"{header}:",
        f"  title:       {draft.title}",
        f"  description: {draft.description}",
        f"  status:      {draft.status}",
        f"  priority:    {draft.priority}",
        f"  due_date:    {due}",
        f"  tags:        {draft.tags}",
        f"  assigned_to: {draft.assigned_to}",
    ]
    errors = editor.errors
    for name, message in errors.items():
        lines.append(f"  ! {name}: {message}")
    lines.append("  /save to submit" if not errors else "  (fix the errors above before /save)")
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_search(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.dashboard.set_filter("search", " ".join(args))
    return describe_filters(state)


def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /filter <key> <value>   -> set a filter (value "all" removes it)
    /filter <key>           -> remove a filter
    """
    if not args:
        return "Usage: /filter <key> [value]. Keys: " + ", ".join(ALL_KEYS)
    key = args[0].lower()
    value: Any = " ".join(args[1:])
    state.dashboard.set_filter(key, value)
    return describe_filters(state)


def cmd_sort(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /sort <created_at|updated_at|due_date|priority|title> [asc|desc]"
    state.dashboard.set_sort(args[0], args[1] if len(args) > 1 else None)
    return describe_filters(state)


def cmd_page(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return f"Page {state.dashboard.filters.page} of {state.dashboard.view.pagination.total_pages}."
    try:
        page = int(args[0])
    except ValueError:
        raise ValueError(f"Page must be a number, got {args[0]!r}") from None
    state.dashboard.go_to_page(page)
    return describe_filters(state)


def cmd_next(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.dashboard.next_page()
    return describe_filters(state)


def cmd_prev(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.dashboard.prev_page()
    return describe_filters(state)


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.dashboard.clear_filters()
    return "Filters cleared."


def cmd_url(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    qs = state.dashboard.query_string
    return f"/dashboard?{qs}" if qs else "/dashboard"


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    view = state.dashboard.view
    text = render_task_list(view.tasks, view.pagination)
    if view.loading:
        text += "\n(loading...)"
    return text


async def cmd_refresh(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    await state.dashboard.refresh()
    return cmd_list(state, args, emit)


async def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    await state.dashboard.refresh_counts()
    return render_counts(state.dashboard.counts)


async def cmd_users(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    await state.dashboard.load_users()
    users = state.dashboard.users
    if not users:
        return "No assignable users."
    return "\n".join(f"  {u.id}: {u.name}" for u in users)


def cmd_new(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    editor = state.dashboard.editor
    editor.open()
    if args:
        editor.update_many(parse_assignments(args))
    return render_form(editor)


def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /edit <id> [field=value ...]"
    task = state.dashboard.find_task(args[0])
    if task is None:
        return f"Task #{args[0]} is not on the current page."
    editor = state.dashboard.editor
    editor.open(task)
    if len(args) > 1:
        editor.update_many(parse_assignments(args[1:]))
    return render_form(editor)


def cmd_set(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /set field=value [field=value ...]"
    editor = state.dashboard.editor
    editor.update_many(parse_assignments(args))
    return render_form(editor)


def cmd_form(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return render_form(state.dashboard.editor)


async def cmd_save(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    editor = state.dashboard.editor
    if not editor.is_open:
        return "No task form is open. Use /new or /edit <id>."
    saved = await editor.submit()
    if saved is None:
        return render_form(editor)
    return f"Saved task #{saved.id}."


def cmd_cancel(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.dashboard.editor.cancel()
    return "Form discarded."


async def cmd_delete(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /delete <id>"
    ok = await state.dashboard.delete_task(args[0])
    return f"Deleted task #{args[0]}." if ok else f"Task #{args[0]} was not deleted."


def cmd_copy(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /copy <id>"
    task = state.dashboard.find_task(args[0])
    if task is None:
        return f"Task #{args[0]} is not on the current page."
    return task_clipboard_text(task)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("search", cmd_search, help_text="Search title/description: /search <text> (empty clears).")
registry.register("filter", cmd_filter, help_text="Set a filter: /filter status done | /filter status all.")
registry.register("sort", cmd_sort, help_text="Sort: /sort <field> [asc|desc].")
registry.register("page", cmd_page, help_text="Go to a page: /page <n>.")
registry.register("next", cmd_next, help_text="Next page.")
registry.register("prev", cmd_prev, help_text="Previous page.")
registry.register("clear", cmd_clear, help_text="Reset all filters, sorting and paging.")
registry.register("url", cmd_url, help_text="Show the shareable link for the current view.")
registry.register("list", cmd_list, help_text="Show the current page of tasks.", aliases=["ls"])
registry.register("refresh", cmd_refresh, help_text="Reload the current page now.")
registry.register("stats", cmd_stats, help_text="Show task counts by status.")
registry.register("users", cmd_users, help_text="List assignable users.")
registry.register("new", cmd_new, help_text="Open a new task form: /new title=\"...\" priority=high.")
registry.register("edit", cmd_edit, help_text="Edit a task from this page: /edit <id> [field=value ...].")
registry.register("set", cmd_set, help_text="Change form fields: /set due_date=2030-01-31.")
registry.register("form", cmd_form, help_text="Show the open form and its errors.")
registry.register("save", cmd_save, help_text="Submit the open form.")
registry.register("cancel", cmd_cancel, help_text="Discard the open form.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("copy", cmd_copy, help_text="Print a task as copyable text: /copy <id>.")
