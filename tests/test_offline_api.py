# tests/test_offline_api.py

from __future__ import annotations

from datetime import date, timedelta

import pytest

from tasktrack.api.client import ApiError
from tasktrack.api.offline import OfflineTaskApi


@pytest.mark.asyncio
async def test_seeded_demo_data_and_stats() -> None:
    api = OfflineTaskApi(owner_name="demo")
    page = await api.list_tasks([("page", "1"), ("per_page", "10")])
    assert page.pagination.total == 5
    assert page.pagination.total_pages == 1

    counts = await api.get_stats()
    assert counts.total == 5
    assert (await api.list_users())[0].name == "demo"


@pytest.mark.asyncio
async def test_filters_and_paging() -> None:
    api = OfflineTaskApi()

    found = await api.list_tasks([("search", "login bug")])
    assert [t.title for t in found.tasks] == ["Fix login bug"]

    high = await api.list_tasks([("priority", "high"), ("sort_by", "title"), ("sort_order", "asc")])
    assert [t.title for t in high.tasks] == ["Fix login bug", "Write API documentation"]

    paged = await api.list_tasks([("per_page", "2"), ("page", "3")])
    assert len(paged.tasks) == 1
    assert paged.pagination.total_pages == 3

    empty = await api.list_tasks([("status", "done"), ("tags", "docs")])
    assert empty.tasks == ()
    assert empty.pagination.total_pages == 1


@pytest.mark.asyncio
async def test_create_update_delete_roundtrip() -> None:
    api = OfflineTaskApi(seed=False)
    created = await api.create_task({"title": "  Ship it  ", "priority": "low"})
    assert created.title == "Ship it"
    assert created.status == "todo"

    updated = await api.update_task(created.id, {"title": "Ship it now", "status": "done"})
    assert updated.status == "done"
    assert updated.priority == "low"

    await api.delete_task(created.id)
    assert (await api.get_stats()).total == 0
    with pytest.raises(ApiError) as exc:
        await api.delete_task(created.id)
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_server_side_validation() -> None:
    api = OfflineTaskApi(seed=False)

    with pytest.raises(ApiError) as exc:
        await api.create_task({"title": "ab"})
    assert "title" in exc.value.fields

    yesterday = (date.today() - timedelta(days=1)).isoformat()
    with pytest.raises(ApiError) as exc:
        await api.create_task({"title": "Too late", "due_date": yesterday})
    assert exc.value.server_message == "Due date cannot be in the past"

    with pytest.raises(ApiError):
        await api.list_tasks([("page", "x")])
