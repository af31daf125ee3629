# src/tasktrack/query/codec.py

"""
Parameter codec: FilterSet <-> canonical query string.

Two encodings exist:
- serialize(): the canonical, minimal string for the address bar / shared links
  (filters and paging keys at their default value are omitted);
- request_params(): what GET /tasks receives; always states page, per_page,
  sort_by and sort_order explicitly after the active filters.

parse() is tolerant: a shared link must never fail to open.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit

from .filters import (
    ALL_KEYS,
    FILTER_KEYS,
    FilterDefaults,
    FilterSet,
    SortBy,
    SortOrder,
    coerce_value,
    is_noop,
)

logger = logging.getLogger(__name__)


def _encode_value(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _positive_int(raw: Any, default: int) -> int:
    try:
        n = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return n if n >= 1 else default


def normalize(filters: FilterSet, defaults: FilterDefaults | None = None) -> FilterSet:
    """Strip no-op and out-of-domain values, leaving the canonical equivalent."""
    d = defaults or FilterDefaults()
    values: dict[str, Any] = {}

    for key in FILTER_KEYS:
        raw = getattr(filters, key)
        if is_noop(raw):
            values[key] = None
            continue
        try:
            values[key] = coerce_value(key, raw)
        except ValueError:
            values[key] = None

    try:
        values["sort_by"] = SortBy(str(filters.sort_by))
    except ValueError:
        values["sort_by"] = d.sort_by
    try:
        values["sort_order"] = SortOrder(str(filters.sort_order))
    except ValueError:
        values["sort_order"] = d.sort_order

    values["page"] = _positive_int(filters.page, 1)
    values["per_page"] = _positive_int(filters.per_page, d.per_page)
    return FilterSet(**values)


def to_pairs(filters: FilterSet, defaults: FilterDefaults | None = None) -> list[tuple[str, str]]:
    """Canonical (key, value) pairs: fixed key order, defaults omitted."""
    d = defaults or FilterDefaults()
    f = normalize(filters, d)

    pairs = [(k, _encode_value(v)) for k, v in f.active_filters().items()]
    if f.page != 1:
        pairs.append(("page", str(f.page)))
    if f.per_page != d.per_page:
        pairs.append(("per_page", str(f.per_page)))
    if f.sort_by != d.sort_by:
        pairs.append(("sort_by", f.sort_by.value))
    if f.sort_order != d.sort_order:
        pairs.append(("sort_order", f.sort_order.value))
    return pairs


def serialize(filters: FilterSet, defaults: FilterDefaults | None = None) -> str:
    return urlencode(to_pairs(filters, defaults))


def request_params(filters: FilterSet, defaults: FilterDefaults | None = None) -> list[tuple[str, str]]:
    """Query parameters for GET /tasks."""
    f = normalize(filters, defaults)
    pairs = [(k, _encode_value(v)) for k, v in f.active_filters().items()]
    pairs.extend(
        [
            ("page", str(f.page)),
            ("per_page", str(f.per_page)),
            ("sort_by", f.sort_by.value),
            ("sort_order", f.sort_order.value),
        ]
    )
    return pairs


def _query_part(query: str) -> str:
    s = (query or "").strip()
    if "://" in s or s.startswith("/"):
        return urlsplit(s).query
    if "?" in s:
        return s.split("?", 1)[1]
    return s


def parse(query: str, defaults: FilterDefaults | None = None) -> FilterSet:
    """
    Rebuild a FilterSet from a query string, a "?..." suffix or a full URL.

    Unknown keys are ignored; for repeated keys the first occurrence wins.
    """
    d = defaults or FilterDefaults()
    raw: dict[str, str] = {}
    for key, value in parse_qsl(_query_part(query), keep_blank_values=True):
        if key in ALL_KEYS and key not in raw:
            raw[key] = value

    values: dict[str, Any] = {}
    for key in FILTER_KEYS:
        value = raw.get(key)
        if is_noop(value):
            continue
        try:
            values[key] = coerce_value(key, value)
        except ValueError:
            logger.debug("Ignoring malformed query value %s=%r", key, value)

    values["page"] = _positive_int(raw.get("page"), 1)
    values["per_page"] = _positive_int(raw.get("per_page"), d.per_page)

    try:
        values["sort_by"] = coerce_value("sort_by", raw["sort_by"]) if raw.get("sort_by") else d.sort_by
    except ValueError:
        values["sort_by"] = d.sort_by
    try:
        values["sort_order"] = coerce_value("sort_order", raw["sort_order"]) if raw.get("sort_order") else d.sort_order
    except ValueError:
        values["sort_order"] = d.sort_order

    return FilterSet(**values)
