# tests/test_api_client.py

from __future__ import annotations

from datetime import date

import httpx
import pytest

from tasktrack.api.client import ApiError, HttpTaskApi, friendly_api_error_message


def _api(handler, token: str | None = "secret") -> HttpTaskApi:
    return HttpTaskApi("http://tasks.test/api/", token=token, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_tasks_sends_params_in_order_with_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "tasks": [
                    {"id": 7, "title": "Fix login bug", "status": "todo", "priority": "high",
                     "due_date": "2026-04-01T00:00:00.000Z", "tags": "bug,auth"},
                ],
                "pagination": {"page": 1, "per_page": 10, "total": 0, "total_pages": 0},
            },
        )

    api = _api(handler)
    page = await api.list_tasks(
        [("search", "bug"), ("page", "1"), ("per_page", "10"), ("sort_by", "created_at"), ("sort_order", "desc")]
    )
    await api.aclose()

    request = seen[0]
    assert request.url.path == "/api/tasks"
    assert request.url.query == b"search=bug&page=1&per_page=10&sort_by=created_at&sort_order=desc"
    assert request.headers["Authorization"] == "Bearer secret"

    assert page.tasks[0].id == "7"
    assert page.tasks[0].due_date == date(2026, 4, 1)
    assert page.tasks[0].tag_list == ["bug", "auth"]
    # An empty result still has one page.
    assert page.pagination.total_pages == 1


@pytest.mark.asyncio
async def test_no_token_means_no_authorization_header() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"todo": 2, "doing": "1", "done": None})

    api = _api(handler, token=None)
    counts = await api.get_stats()
    await api.aclose()

    assert "Authorization" not in seen[0].headers
    assert (counts.todo, counts.doing, counts.done) == (2, 1, 0)


@pytest.mark.asyncio
async def test_detail_error_envelope() -> None:
    api = _api(lambda request: httpx.Response(400, json={"detail": "Due date cannot be in the past"}))
    with pytest.raises(ApiError) as exc:
        await api.create_task({"title": "x"})
    await api.aclose()

    err = exc.value
    assert err.kind == "server"
    assert err.status_code == 400
    assert friendly_api_error_message(err, "Error saving task") == "Due date cannot be in the past"


@pytest.mark.asyncio
async def test_structured_error_envelope_with_fields() -> None:
    body = {
        "error": {
            "code": "INVALID_INPUT",
            "message": "Invalid input",
            "fields": {"title": "Title must be between 3 and 120 characters"},
        }
    }
    api = _api(lambda request: httpx.Response(422, json=body))
    with pytest.raises(ApiError) as exc:
        await api.update_task("3", {"title": "x"})
    await api.aclose()

    assert exc.value.message == "Invalid input"
    assert exc.value.fields == {"title": "Title must be between 3 and 120 characters"}


@pytest.mark.asyncio
async def test_error_without_body_falls_back() -> None:
    api = _api(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(ApiError) as exc:
        await api.delete_task("3")
    await api.aclose()

    assert exc.value.server_message is None
    assert friendly_api_error_message(exc.value, "Error deleting task") == "Error deleting task"


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = _api(handler)
    with pytest.raises(ApiError) as exc:
        await api.list_users()
    await api.aclose()

    assert exc.value.kind == "transport"
    assert friendly_api_error_message(exc.value, "Error loading tasks") == "Error loading tasks"


@pytest.mark.asyncio
async def test_unauthorized_has_session_message() -> None:
    api = _api(lambda request: httpx.Response(401, json={"detail": "Not authenticated"}))
    with pytest.raises(ApiError) as exc:
        await api.get_stats()
    await api.aclose()

    assert "TASKTRACK_API_TOKEN" in friendly_api_error_message(exc.value, "x")


@pytest.mark.asyncio
async def test_delete_no_content_and_users() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            assert request.url.path == "/api/tasks/9"
            return httpx.Response(204)
        return httpx.Response(200, json=[{"id": 1, "name": "Ana"}, "junk"])

    api = _api(handler)
    assert await api.delete_task("9") is None
    users = await api.list_users()
    await api.aclose()

    assert [(u.id, u.name) for u in users] == [("1", "Ana")]


def test_missing_base_url_is_rejected() -> None:
    with pytest.raises(RuntimeError):
        HttpTaskApi("  ")
