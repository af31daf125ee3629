# src/tasktrack/api/client.py

from __future__ import annotations

import logging
from typing import Any, Literal

import httpx

from ..core.ports import QueryParams
from ..tasks.task_models import AssignableUser, PaginationMeta, StatusCounts, Task, TaskPage

logger = logging.getLogger(__name__)

ErrorKind = Literal["transport", "server"]


class ApiError(RuntimeError):
    """
    Failure talking to the task service.

    kind="transport": no usable HTTP response (DNS, refused, timeout, bad JSON).
    kind="server": the service answered with a 4xx/5xx; `message` is the
    server's own text when it sent one.
    """

    def __init__(
            self,
            kind: ErrorKind,
            message: str = "",
            *,
            status_code: int | None = None,
            fields: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message or kind)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.fields = fields or {}

    @property
    def server_message(self) -> str | None:
        if self.kind == "server" and self.message:
            return self.message
        return None


def friendly_api_error_message(err: Exception, fallback: str) -> str:
    """Server-provided message when there is one, otherwise `fallback`."""
    if isinstance(err, ApiError):
        if err.status_code == 401:
            return "Session expired. Set a valid TASKTRACK_API_TOKEN."
        if err.server_message:
            return err.server_message
    return fallback


def _extract_error(response: httpx.Response) -> tuple[str, dict[str, str]]:
    """
    Understand both error envelopes the service may send:
    {"error": {"code", "message", "fields"}} and {"detail": "..."}.
    """
    try:
        data = response.json()
    except ValueError:
        return "", {}

    if not isinstance(data, dict):
        return "", {}

    detail = data.get("detail")
    if isinstance(detail, str) and detail.strip():
        return detail.strip(), {}

    err = data.get("error")
    if isinstance(err, dict):
        message = str(err.get("message") or "").strip()
        raw_fields = err.get("fields")
        fields = {str(k): str(v) for k, v in raw_fields.items()} if isinstance(raw_fields, dict) else {}
        return message, fields

    message = data.get("message")
    if isinstance(message, str):
        return message.strip(), {}
    return "", {}


def build_timeout(connect_s: float, read_s: float | None) -> httpx.Timeout:
    """read_s=None disables the read timeout (requests may hang until the server answers)."""
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


class HttpTaskApi:
    """TaskApi over HTTP (httpx.AsyncClient)."""

    def __init__(
            self,
            base_url: str,
            *,
            token: str | None = None,
            timeout: httpx.Timeout | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise RuntimeError("API base URL is not set. Set TASKTRACK_API_BASE_URL in your .env.")

        headers = {"Accept": "application/json"}
        if token and token.strip():
            headers["Authorization"] = f"Bearer {token.strip()}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout or build_timeout(5.0, 30.0),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
            self,
            method: str,
            path: str,
            *,
            params: QueryParams | None = None,
            json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.info("HTTP %s %s failed: %s", method, path, e.__class__.__name__)
            raise ApiError("transport", str(e) or e.__class__.__name__) from e

        if response.status_code >= 400:
            message, fields = _extract_error(response)
            if response.status_code == 401:
                logger.warning("HTTP %s %s -> 401 (token rejected)", method, path)
            else:
                logger.info("HTTP %s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError("server", message, status_code=response.status_code, fields=fields)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError("transport", f"Invalid JSON from {method} {path}") from e

    async def list_tasks(self, params: QueryParams) -> TaskPage:
        data = await self._request("GET", "/tasks", params=params)
        if not isinstance(data, dict):
            raise ApiError("transport", "Unexpected /tasks response shape")

        requested = dict(params)
        try:
            page = int(requested.get("page", 1))
            per_page = int(requested.get("per_page", 10))
        except ValueError:
            page, per_page = 1, 10

        tasks = tuple(Task.from_payload(t) for t in data.get("tasks") or [] if isinstance(t, dict))
        raw_pagination = data.get("pagination")
        pagination = PaginationMeta.from_payload(
            raw_pagination if isinstance(raw_pagination, dict) else {"total": len(tasks)},
            fallback_page=page,
            fallback_per_page=per_page,
        )
        return TaskPage(tasks=tasks, pagination=pagination)

    async def get_stats(self) -> StatusCounts:
        data = await self._request("GET", "/tasks/stats")
        return StatusCounts.from_payload(data if isinstance(data, dict) else {})

    async def list_users(self) -> list[AssignableUser]:
        data = await self._request("GET", "/users")
        if not isinstance(data, list):
            return []
        return [AssignableUser.from_payload(u) for u in data if isinstance(u, dict)]

    async def create_task(self, payload: dict[str, Any]) -> Task:
        data = await self._request("POST", "/tasks", json=payload)
        return Task.from_payload(data if isinstance(data, dict) else {})

    async def update_task(self, task_id: str, payload: dict[str, Any]) -> Task:
        data = await self._request("PUT", f"/tasks/{task_id}", json=payload)
        return Task.from_payload(data if isinstance(data, dict) else {})

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")
