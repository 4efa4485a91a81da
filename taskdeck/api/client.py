from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from taskdeck.models.task import StatusUpdate, Task, TaskDraft, TaskStatus, parse_task_list
from taskdeck.observability import get_json_logger, get_metrics, timed

from .errors import InvalidRequest, NetworkFailure, ServerRejection

DEFAULT_API_URL = "http://10.0.2.2:3000/api/tasks"

# Delete is acknowledged only by "No Content"
DELETE_SUCCESS_STATUS = 204


class TaskApiClient:
    """Async HTTP client for the tasks resource.

    Every method makes exactly one attempt. Transport errors and unparseable
    bodies raise `NetworkFailure`; responses without the operation's success
    signal raise `ServerRejection`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(timeout=httpx.Timeout(timeout), transport=transport)
        self._logger = get_json_logger("taskdeck.api")
        self._metrics = get_metrics()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> TaskApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _task_url(self, task_id: int) -> str:
        return f"{self._base_url}/{int(task_id)}"

    async def _send(
        self, operation: str, method: str, url: str, body: dict[str, Any] | None = None
    ) -> httpx.Response:
        with timed() as t:
            try:
                resp = await self._http.request(method, url, json=body)
            except httpx.HTTPError as e:
                self._metrics.increment(
                    "api_requests", {"operation": operation, "outcome": "error"}
                )
                self._logger.error(
                    "api request failed",
                    extra={
                        "event": "api_error",
                        "operation": operation,
                        "method": method,
                        "url": url,
                        "error_kind": "network",
                        "attributes": {"error": str(e)[:200]},
                    },
                )
                raise NetworkFailure(operation, f"{operation} failed: {e}") from e
        self._metrics.increment(
            "api_requests", {"operation": operation, "outcome": str(resp.status_code)}
        )
        self._logger.debug(
            "api request",
            extra={
                "event": "api_request",
                "operation": operation,
                "method": method,
                "url": url,
                "status_code": resp.status_code,
                "duration_ms": t.get("duration_ms"),
            },
        )
        return resp

    async def list_tasks(self) -> list[Task]:
        resp = await self._send("list", "GET", self._base_url)
        if not resp.is_success:
            raise ServerRejection("list", resp.status_code)
        try:
            return parse_task_list(resp.json())
        except ValueError as e:  # JSONDecodeError and ValidationError
            raise NetworkFailure("list", f"list returned an unreadable body: {e}") from e

    async def create_task(self, draft: TaskDraft) -> None:
        resp = await self._send("create", "POST", self._base_url, draft.to_wire())
        if not resp.is_success:
            raise ServerRejection("create", resp.status_code)

    async def update_task_status(self, task_id: int, status: TaskStatus) -> None:
        try:
            body = StatusUpdate(status=status).to_wire()
        except ValidationError as e:
            raise InvalidRequest("update_status", f"invalid status {status!r}") from e
        resp = await self._send("update_status", "PUT", self._task_url(task_id), body)
        if not resp.is_success:
            raise ServerRejection("update_status", resp.status_code)

    async def delete_task(self, task_id: int) -> None:
        resp = await self._send("delete", "DELETE", self._task_url(task_id))
        if resp.status_code != DELETE_SUCCESS_STATUS:
            raise ServerRejection("delete", resp.status_code)


__all__ = ["DEFAULT_API_URL", "DELETE_SUCCESS_STATUS", "TaskApiClient"]
