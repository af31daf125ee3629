# src/tasktrack/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.ports import Notification
from ..core.state import AppState
from ..tasks.reconciler import TaskListView
from ..tasks.view_helpers import render_task_list

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Toasts for the console: one timestamped line per notification."""

    def notify(self, notification: Notification) -> None:
        marker = "!" if notification.variant == "destructive" else "*"
        text = f"[{marker}] {notification.title}"
        if notification.description:
            text += f": {notification.description}"
        _print_ts(text)


class AddressBar:
    """QueryStringSink that keeps the last canonical query string (the console has no URL bar)."""

    def __init__(self) -> None:
        self.current = ""
        self.history: list[str] = []

    def write(self, query_string: str) -> None:
        self.current = query_string
        self.history.append(query_string)


def _render_on_update(view: TaskListView) -> None:
    # Only settled, successful views are printed; failures arrive as notifications.
    if view.loading or view.error is not None:
        return
    _print_ts("\n" + render_task_list(view.tasks, view.pagination))


async def run_console_loop(state: AppState, *, read_line: Callable[[str], str] = input) -> None:
    logger.info("Console connector started (api=%s).", "offline" if getattr(state.settings, "offline", False) else "http")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    unsubscribe = state.dashboard.reconciler.subscribe(_render_on_update)

    def emit(text: str) -> None:
        _print_ts(text)

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(read_line, ">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                # Plain text is a search, like typing into the search box.
                user_input = f"/search {user_input}"

            try:
                response = await command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is not None:
                _print_ts(response)
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
