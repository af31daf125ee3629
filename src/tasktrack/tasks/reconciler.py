# src/tasktrack/tasks/reconciler.py

"""
Task list reconciler.

Fetches may complete out of order. Each fetch takes a sequence number from
begin(); a result is applied only if its sequence number is still the latest
one issued. Everything else is dropped without touching the view, including
the loading flag.

The status counts have their own generation counter: they are refreshed
independently of the filtered list and must not be overwritten by an older
stats response either.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from ..core.ports import Notification, Notifier
from ..query.filters import FilterSet
from .task_models import PaginationMeta, StatusCounts, Task

logger = logging.getLogger(__name__)

LOAD_ERROR_TITLE = "Error"
LOAD_ERROR_MESSAGE = "Error loading tasks"


@dataclass(slots=True, frozen=True)
class TaskListView:
    """What the renderer sees. Always replaced as a whole."""

    tasks: tuple[Task, ...] = ()
    pagination: PaginationMeta = PaginationMeta()
    loading: bool = False
    error: str | None = None
    filters: FilterSet | None = None


ViewListener = Callable[[TaskListView], None]
CountsListener = Callable[[StatusCounts], None]


class TaskListReconciler:
    def __init__(self, notifier: Notifier | None = None, *, per_page: int = 10) -> None:
        self._notifier = notifier
        self._view = TaskListView(pagination=PaginationMeta(per_page=per_page))
        self._counts = StatusCounts()

        self._issued = 0
        self._pending: dict[int, FilterSet] = {}
        self._counts_issued = 0
        self._closed = False

        self._view_listeners: list[ViewListener] = []
        self._counts_listeners: list[CountsListener] = []

    # ---- read side ----

    @property
    def view(self) -> TaskListView:
        return self._view

    @property
    def counts(self) -> StatusCounts:
        return self._counts

    @property
    def loading(self) -> bool:
        return self._view.loading

    @property
    def latest_sequence(self) -> int:
        return self._issued

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def outstanding(self) -> int:
        """Number of issued fetches whose filters are still remembered."""
        return len(self._pending)

    def is_current(self, seq: int) -> bool:
        return not self._closed and seq == self._issued

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        self._view_listeners.append(listener)
        return lambda: _discard(self._view_listeners, listener)

    def subscribe_counts(self, listener: CountsListener) -> Callable[[], None]:
        self._counts_listeners.append(listener)
        return lambda: _discard(self._counts_listeners, listener)

    # ---- task list ----

    def begin(self, filters: FilterSet) -> int:
        """Tag a new fetch. Loading stays true until the latest fetch is processed."""
        self._issued += 1
        seq = self._issued
        # Older fetches can no longer be applied; forget their filters.
        self._pending.clear()
        self._pending[seq] = filters
        if not self._closed:
            self._set_view(replace(self._view, loading=True))
        logger.debug("Fetch #%s issued", seq)
        return seq

    def apply(self, seq: int, tasks: tuple[Task, ...] | list[Task], pagination: PaginationMeta) -> bool:
        filters = self._pending.pop(seq, None)
        if not self.is_current(seq):
            logger.debug("Dropping stale result #%s (latest=#%s, closed=%s)", seq, self._issued, self._closed)
            return False

        self._set_view(
            TaskListView(
                tasks=tuple(tasks),
                pagination=pagination,
                loading=False,
                error=None,
                filters=filters,
            )
        )
        logger.debug("Applied result #%s (%d tasks, total=%s)", seq, len(self._view.tasks), pagination.total)
        return True

    def fail(self, seq: int, error: Exception) -> bool:
        """Keep the previous list/pagination, clear loading and tell the user."""
        self._pending.pop(seq, None)
        if not self.is_current(seq):
            logger.debug("Dropping stale failure #%s: %s", seq, error)
            return False

        logger.warning("Loading tasks failed (#%s): %s", seq, error)
        self._set_view(replace(self._view, loading=False, error=str(error) or LOAD_ERROR_MESSAGE))
        if self._notifier is not None:
            self._notifier.notify(
                Notification(title=LOAD_ERROR_TITLE, description=LOAD_ERROR_MESSAGE, variant="destructive")
            )
        return True

    # ---- status counts ----

    def begin_counts(self) -> int:
        self._counts_issued += 1
        return self._counts_issued

    def apply_counts(self, generation: int, counts: StatusCounts) -> bool:
        if self._closed or generation != self._counts_issued:
            logger.debug("Dropping stale status counts #%s", generation)
            return False
        self._counts = counts
        for listener in list(self._counts_listeners):
            try:
                listener(counts)
            except Exception:
                logger.exception("Counts listener failed: %r", listener)
        return True

    def fail_counts(self, generation: int, error: Exception) -> None:
        # Counts are secondary information: log only, keep the previous numbers.
        logger.error("Loading status counts failed (#%s): %s", generation, error)

    # ---- lifecycle ----

    def close(self) -> None:
        """Drop everything that arrives from now on (view torn down)."""
        self._closed = True
        self._pending.clear()

    # ---- internals ----

    def _set_view(self, view: TaskListView) -> None:
        self._view = view
        for listener in list(self._view_listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("View listener failed: %r", listener)


def _discard(listeners: list, listener) -> None:
    try:
        listeners.remove(listener)
    except ValueError:
        pass
