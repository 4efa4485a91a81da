from __future__ import annotations

import asyncio
import datetime as _dt
from collections.abc import Awaitable, Callable
from enum import Enum

from pydantic import ValidationError

from taskdeck.api.client import TaskApiClient
from taskdeck.api.errors import InvalidRequest, ServerRejection, TaskApiError
from taskdeck.models.task import Task, TaskDraft, TaskStatus
from taskdeck.observability import get_json_logger, get_metrics

from .notifications import LoggingNotifier, Notifier, notification_for

Listener = Callable[["TaskStore"], None]


class StorePhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class TaskStore:
    """In-memory task collection kept in step with the tasks API.

    The collection only ever holds the last snapshot the server returned:
    every mutation goes to the server first and, once acknowledged, the
    whole collection is fetched again through `reconcile()`. Failures never
    raise out of the public operations; they raise a notification, leave
    the collection untouched and resolve to `False`.

    Fetches are serialized with a lock, so an overlapping fetch waits for
    the one in flight and its snapshot lands last. `loading` covers the
    whole queue, not just the fetch currently holding the lock.
    """

    def __init__(self, api: TaskApiClient, *, notifier: Notifier | None = None) -> None:
        self._api = api
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._tasks: tuple[Task, ...] = ()
        self._loading = False
        self._phase = StorePhase.UNINITIALIZED
        self._last_error: TaskApiError | None = None
        self._fetch_lock = asyncio.Lock()
        self._pending_fetches = 0
        self._listeners: list[Listener] = []
        self._logger = get_json_logger("taskdeck.store")
        self._metrics = get_metrics()

    # ----- state -----
    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def phase(self) -> StorePhase:
        return self._phase

    @property
    def last_error(self) -> TaskApiError | None:
        """Error of the most recent failed operation, cleared on the next success."""
        return self._last_error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(store)` after every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                self._logger.exception(
                    "store listener failed", extra={"event": "store_listener_error"}
                )

    def _fail(self, error: TaskApiError, task_id: int | None = None) -> None:
        self._last_error = error
        self._metrics.increment(
            "store_failures", {"operation": error.operation, "kind": error.kind}
        )
        fields: dict[str, object] = {
            "event": "store_error",
            "operation": error.operation,
            "error_kind": error.kind,
            "attributes": {"error": str(error)[:200]},
        }
        if task_id is not None:
            fields["task_id"] = task_id
        if isinstance(error, ServerRejection):
            fields["status_code"] = error.status_code
        self._logger.warning("store operation failed", extra=fields)
        self._notifier.notify(notification_for(error))

    # ----- operations -----
    async def fetch_tasks(self) -> bool:
        """Replace the collection with a fresh server snapshot.

        Returns True when the snapshot was replaced. On failure the previous
        collection stays in place. `loading` stays True while any fetch is
        in flight or queued and is False once the last one resolves.
        """
        self._pending_fetches += 1
        if not self._loading:
            self._loading = True
            self._phase = StorePhase.LOADING
            self._emit()
        try:
            async with self._fetch_lock:
                return await self._fetch_snapshot()
        finally:
            self._pending_fetches -= 1
            if self._pending_fetches == 0:
                self._loading = False
                self._phase = StorePhase.READY
            self._emit()

    async def _fetch_snapshot(self) -> bool:
        try:
            snapshot = await self._api.list_tasks()
        except TaskApiError as e:
            self._fail(e)
            return False
        self._tasks = tuple(snapshot)
        self._last_error = None
        self._metrics.increment("store_ops", {"operation": "list"})
        self._logger.info(
            "tasks fetched",
            extra={
                "event": "store_fetch",
                "operation": "list",
                "task_count": len(snapshot),
            },
        )
        return True

    async def reconcile(self) -> bool:
        """Bring the collection back in line with the server after a mutation.

        Currently a full refetch; incremental patching would slot in here.
        """
        return await self.fetch_tasks()

    async def _mutate(
        self, operation: str, call: Awaitable[None], task_id: int | None = None
    ) -> bool:
        try:
            await call
        except TaskApiError as e:
            self._fail(e, task_id)
            return False
        self._last_error = None
        self._metrics.increment("store_ops", {"operation": operation})
        extra: dict[str, object] = {"event": "store_mutation", "operation": operation}
        if task_id is not None:
            extra["task_id"] = task_id
        self._logger.info("task mutation acknowledged", extra=extra)
        # Refetch strictly after the acknowledgement; a failed refetch notifies on
        # its own and does not undo the acknowledged mutation.
        await self.reconcile()
        return True

    async def create_task(
        self,
        title: str | TaskDraft,
        description: str = "",
        due_date: _dt.date | str | None = None,
    ) -> bool:
        if isinstance(title, TaskDraft):
            draft = title
        else:
            try:
                draft = TaskDraft(title=title, description=description, due_date=due_date)
            except ValidationError as e:
                self._fail(InvalidRequest("create", f"invalid task input: {e}"))
                return False
        return await self._mutate("create", self._api.create_task(draft))

    async def update_task_status(self, task_id: int, status: TaskStatus) -> bool:
        return await self._mutate(
            "update_status", self._api.update_task_status(task_id, status), task_id
        )

    async def delete_task(self, task_id: int) -> bool:
        return await self._mutate("delete", self._api.delete_task(task_id), task_id)

    def get_task_by_id(self, task_id: int) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    async def aclose(self) -> None:
        await self._api.aclose()


__all__ = ["Listener", "StorePhase", "TaskStore"]
