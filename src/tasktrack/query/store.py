# src/tasktrack/query/store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from . import codec
from .filters import FilterDefaults, FilterSet

logger = logging.getLogger(__name__)

FilterListener = Callable[[FilterSet], None]


class QueryStateStore:
    """
    Single source of truth for the task-list FilterSet.

    Every successful set()/clear() replaces the snapshot, re-serializes the
    canonical query string and then publishes the snapshot to subscribers
    (URL sink, fetch scheduler, ...) in registration order.

    Nothing else writes the canonical query string.
    """

    def __init__(self, initial: FilterSet | None = None, *, defaults: FilterDefaults | None = None) -> None:
        self._defaults = defaults or FilterDefaults()
        self._filters = codec.normalize(initial or FilterSet.defaults(self._defaults), self._defaults)
        self._query_string = codec.serialize(self._filters, self._defaults)
        self._listeners: list[FilterListener] = []

    @classmethod
    def from_query_string(cls, query: str, *, defaults: FilterDefaults | None = None) -> QueryStateStore:
        d = defaults or FilterDefaults()
        return cls(codec.parse(query, d), defaults=d)

    @property
    def defaults(self) -> FilterDefaults:
        return self._defaults

    @property
    def query_string(self) -> str:
        return self._query_string

    def get(self) -> FilterSet:
        return self._filters

    def set(self, key: str, value: Any) -> FilterSet:
        """
        Set one parameter. Sentinels ("", "all", "unassigned", None) remove it.

        Any key other than "page" resets page to 1.
        Raises ValueError (store unchanged) for unknown keys or invalid values.
        """
        return self.update({key: value})

    def update(self, values: dict[str, Any]) -> FilterSet:
        """
        Set several parameters as one change: all values are validated before
        anything is committed, and listeners see a single snapshot.
        """
        updated = self._filters
        for key, value in values.items():
            updated = updated.with_value(key, value, self._defaults)
        if any(key != "page" for key in values):
            updated = updated.with_value("page", 1, self._defaults)
        self._replace(updated)
        logger.debug("Filters set %r -> %s", values, self._query_string or "<defaults>")
        return self._filters

    def clear(self) -> FilterSet:
        self._replace(FilterSet.defaults(self._defaults))
        logger.debug("Filters cleared")
        return self._filters

    def subscribe(self, listener: FilterListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    # ---- internals ----

    def _replace(self, filters: FilterSet) -> None:
        self._filters = codec.normalize(filters, self._defaults)
        self._query_string = codec.serialize(self._filters, self._defaults)
        self._publish()

    def _publish(self) -> None:
        snapshot = self._filters
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Filter listener failed: %r", listener)
