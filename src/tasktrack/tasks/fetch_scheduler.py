# src/tasktrack/tasks/fetch_scheduler.py

from __future__ import annotations

"""
Debounced fetch scheduler.

Coalesces bursts of FilterSet changes into a single fetch:
- every notify() (re)starts one timer of `delay_seconds`;
- when the timer fires uninterrupted, the FilterSet current *at fire time* is fetched;
- fetches run as independent asyncio tasks; a new firing never waits for an older fetch.

Stale results are not this module's concern: the reconciler drops them.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..query.filters import FilterSet

logger = logging.getLogger(__name__)

FetchFn = Callable[[FilterSet], Awaitable[None]]
SnapshotFn = Callable[[], FilterSet]


class DebouncedFetchScheduler:
    def __init__(
            self,
            fetch: FetchFn,
            snapshot: SnapshotFn,
            *,
            delay_seconds: float = 0.5,
    ) -> None:
        self._fetch = fetch
        self._snapshot = snapshot
        self._delay = max(0.0, float(delay_seconds))
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired yet."""
        return self._timer is not None

    @property
    def in_flight(self) -> int:
        return len(self._inflight)

    def notify(self, _filters: FilterSet | None = None) -> None:
        """
        Observe a FilterSet change: cancel the armed timer (if any) and re-arm it.

        Must be called from inside the running event loop. The argument is
        accepted so the method can be a store listener; the fetch always uses
        the snapshot taken when the timer fires.
        """
        if self._closed:
            return
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._timer = loop.call_later(self._delay, self._fire)

    def flush(self) -> bool:
        """Fire an armed timer right now. Returns False when nothing was pending."""
        if self._timer is None or self._closed:
            return False
        self._cancel_timer()
        self._launch(self._snapshot())
        return True

    def close(self) -> None:
        """Cancel the armed timer. In-flight fetches keep running."""
        self._closed = True
        self._cancel_timer()

    async def wait_idle(self) -> None:
        """Wait until every launched fetch has finished."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ---- internals ----

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        if self._closed:
            return
        self._launch(self._snapshot())

    def _launch(self, filters: FilterSet) -> None:
        logger.debug("Debounce fired; fetching page=%s", filters.page)
        task = asyncio.get_running_loop().create_task(self._run(filters))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, filters: FilterSet) -> None:
        try:
            await self._fetch(filters)
        except Exception:
            logger.exception("Scheduled fetch failed")
