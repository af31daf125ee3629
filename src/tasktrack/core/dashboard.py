# src/tasktrack/core/dashboard.py

"""
Task dashboard: the task-list view and its lifecycle.

Wiring (the only writer of the FilterSet is the store):

    user action -> QueryStateStore.set/clear
                -> QueryStringSink.write(canonical query)
                -> DebouncedFetchScheduler.notify()
                -> (timer fires) _load_tasks(snapshot)
                -> TaskListReconciler.begin/apply/fail

Mutations (create/update/delete) refresh the list immediately and the
status counts afterwards; they do not go through the debouncer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from ..api.client import friendly_api_error_message
from ..query import codec
from ..query.filters import FilterDefaults, FilterSet, is_noop
from ..query.store import QueryStateStore
from ..tasks.fetch_scheduler import DebouncedFetchScheduler
from ..tasks.reconciler import TaskListReconciler, TaskListView
from ..tasks.task_editor import TaskEditor
from ..tasks.task_models import AssignableUser, StatusCounts, Task
from .ports import Notification, Notifier, QueryStringSink, TaskApi

logger = logging.getLogger(__name__)


class TaskDashboard:
    def __init__(
            self,
            api: TaskApi,
            notifier: Notifier,
            sink: QueryStringSink | None = None,
            *,
            defaults: FilterDefaults | None = None,
            initial_query: str = "",
            debounce_seconds: float = 0.5,
            is_admin: bool = False,
            today: Callable[[], date] = date.today,
    ) -> None:
        self._api = api
        self._notifier = notifier
        self._sink = sink
        self._defaults = defaults or FilterDefaults()
        self.is_admin = is_admin

        self.store = QueryStateStore.from_query_string(initial_query, defaults=self._defaults)
        if not is_admin and self.store.get().assigned_to is not None:
            # Shared links from an admin session: the filter is not available here.
            self.store = QueryStateStore(
                self.store.get().with_value("assigned_to", None, self._defaults),
                defaults=self._defaults,
            )

        self.reconciler = TaskListReconciler(notifier, per_page=self.store.get().per_page)
        self.scheduler = DebouncedFetchScheduler(
            self._load_tasks,
            self.store.get,
            delay_seconds=debounce_seconds,
        )
        self.editor = TaskEditor(api, notifier, on_saved=self._after_saved, today=today)

        self.users: list[AssignableUser] = []
        self._unsubscribe: list[Callable[[], None]] = []
        self._mounted = False

    # ---- read side ----

    @property
    def filters(self) -> FilterSet:
        return self.store.get()

    @property
    def query_string(self) -> str:
        return self.store.query_string

    @property
    def view(self) -> TaskListView:
        return self.reconciler.view

    @property
    def counts(self) -> StatusCounts:
        return self.reconciler.counts

    def find_task(self, task_id: str) -> Task | None:
        for task in self.view.tasks:
            if task.id == str(task_id):
                return task
        return None

    # ---- lifecycle ----

    async def mount(self) -> None:
        """
        Start observing the store, schedule the first fetch, load users and counts.

        An unmounted dashboard cannot be mounted again (its scheduler and
        reconciler are closed); build a new one instead.
        """
        if self.reconciler.closed:
            raise RuntimeError("Dashboard was unmounted; create a new TaskDashboard to mount again")
        if self._mounted:
            return
        self._mounted = True

        if self._sink is not None:
            self._unsubscribe.append(self.store.subscribe(self._write_query_string))
            self._sink.write(self.store.query_string)
        self._unsubscribe.append(self.store.subscribe(self.scheduler.notify))

        self.scheduler.notify()
        await asyncio.gather(self.load_users(), self.refresh_counts())

    def unmount(self) -> None:
        """Cancel the pending debounce and ignore any result still on its way."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()
        self.scheduler.close()
        self.reconciler.close()
        self.editor.cancel()
        self._mounted = False

    async def aclose(self) -> None:
        self.unmount()
        await self.scheduler.wait_idle()

    # ---- filter / paging actions ----

    def set_filter(self, key: str, value: Any) -> FilterSet:
        if key == "assigned_to" and not self.is_admin and not is_noop(value):
            raise ValueError("The assigned_to filter is only available to admins")
        return self.store.set(key, value)

    def clear_filters(self) -> FilterSet:
        return self.store.clear()

    def set_sort(self, sort_by: str, sort_order: str | None = None) -> FilterSet:
        values: dict[str, Any] = {"sort_by": sort_by}
        if sort_order is not None:
            values["sort_order"] = sort_order
        return self.store.update(values)

    def go_to_page(self, page: int) -> FilterSet:
        target = max(1, int(page))
        # The upper bound is only known once the server has sent pagination.
        if self.view.filters is not None:
            target = min(target, max(1, self.view.pagination.total_pages))
        return self.store.set("page", target)

    def next_page(self) -> FilterSet:
        return self.go_to_page(self.filters.page + 1)

    def prev_page(self) -> FilterSet:
        return self.go_to_page(self.filters.page - 1)

    # ---- server round-trips ----

    async def refresh(self) -> None:
        """Fetch the current FilterSet right away (bypasses the debouncer)."""
        await self._load_tasks(self.store.get())

    async def refresh_counts(self) -> None:
        generation = self.reconciler.begin_counts()
        try:
            counts = await self._api.get_stats()
        except Exception as e:
            self.reconciler.fail_counts(generation, e)
            return
        self.reconciler.apply_counts(generation, counts)

    async def load_users(self) -> None:
        try:
            self.users = await self._api.list_users()
        except Exception as e:
            # Only needed for the assignment picker; the list works without it.
            logger.error("Loading users failed: %s", e)

    async def delete_task(self, task_id: str) -> bool:
        try:
            await self._api.delete_task(str(task_id))
        except Exception as e:
            logger.info("Deleting task %s failed: %s", task_id, e)
            self._notifier.notify(
                Notification(
                    title="Error",
                    description=friendly_api_error_message(e, "Error deleting task"),
                    variant="destructive",
                )
            )
            return False

        logger.info("Task %s deleted", task_id)
        self._notifier.notify(Notification(title="Task deleted", description="The task was removed."))
        await self._refresh_after_mutation()
        return True

    # ---- internals ----

    def _write_query_string(self, _filters: FilterSet) -> None:
        if self._sink is not None:
            self._sink.write(self.store.query_string)

    async def _load_tasks(self, filters: FilterSet) -> None:
        seq = self.reconciler.begin(filters)
        try:
            page = await self._api.list_tasks(codec.request_params(filters, self._defaults))
        except Exception as e:
            self.reconciler.fail(seq, e)
            return
        self.reconciler.apply(seq, page.tasks, page.pagination)

    async def _after_saved(self, _task: Task) -> None:
        await self._refresh_after_mutation()

    async def _refresh_after_mutation(self) -> None:
        await asyncio.gather(self.refresh(), self.refresh_counts())
