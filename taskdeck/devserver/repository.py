from __future__ import annotations

import datetime as _dt
import json
from typing import Any, cast

import redis

from taskdeck.models.task import Task, TaskDraft, TaskStatus


def _now() -> _dt.datetime:
    return _dt.datetime.now(_dt.UTC)


class TaskRepository:
    """Storage behind the dev server.

    Implementations assign integer ids, stamp `created_at`/`updated_at`, and
    list tasks in creation order.
    """

    def create(self, draft: TaskDraft) -> Task:  # pragma: no cover - interface only
        raise NotImplementedError

    def get(self, task_id: int) -> Task | None:  # pragma: no cover - interface only
        raise NotImplementedError

    def list_all(self) -> list[Task]:  # pragma: no cover - interface only
        raise NotImplementedError

    def update(
        self, task_id: int, changes: dict[str, Any]
    ) -> Task | None:  # pragma: no cover - interface only
        raise NotImplementedError

    def delete(self, task_id: int) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError


_MUTABLE_FIELDS = {"title", "description", "due_date", "status"}


def _apply(current: Task, changes: dict[str, Any]) -> Task:
    allowed = {k: v for k, v in changes.items() if k in _MUTABLE_FIELDS}
    data = current.model_dump()
    data.update(allowed)
    data["updated_at"] = _now()
    return Task.model_validate(data)


def _new_task(task_id: int, draft: TaskDraft, status: TaskStatus = "Pending") -> Task:
    now = _now()
    return Task(
        id=task_id,
        title=draft.title,
        description=draft.description,
        due_date=draft.due_date,
        status=status,
        created_at=now,
        updated_at=now,
    )


class InMemoryTaskRepository(TaskRepository):
    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self._next_id = 1

    def create(self, draft: TaskDraft) -> Task:
        task = _new_task(self._next_id, draft)
        self._next_id += 1
        self._tasks[task.id] = task
        return task

    def get(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    def list_all(self) -> list[Task]:
        # dicts keep insertion order, which is creation order here
        return list(self._tasks.values())

    def update(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        current = self._tasks.get(task_id)
        if current is None:
            return None
        updated = _apply(current, changes)
        self._tasks[task_id] = updated
        return updated

    def delete(self, task_id: int) -> bool:
        return self._tasks.pop(task_id, None) is not None


class RedisTaskRepository(TaskRepository):
    """Redis-backed repository.

    Data structures:
    - Counter `{prefix}:next_id` for integer ids (INCR)
    - Hash per task: key `{prefix}:task:{id}` with field `json`
    - Sorted set `{prefix}:order` with score=id (ids grow with creation), member=id
    """

    def __init__(self, *, url: str, key_prefix: str = "taskdeck") -> None:
        self._redis: redis.Redis = redis.Redis.from_url(url)
        self._prefix = key_prefix.rstrip(":")

    # key helpers
    def _task_key(self, task_id: int) -> str:
        return f"{self._prefix}:task:{task_id}"

    def _order_key(self) -> str:
        return f"{self._prefix}:order"

    def _id_key(self) -> str:
        return f"{self._prefix}:next_id"

    def _save(self, task: Task) -> None:
        payload = json.dumps(task.model_dump(mode="json"), separators=(",", ":"))
        self._redis.hset(self._task_key(task.id), mapping={"json": payload})

    def create(self, draft: TaskDraft) -> Task:
        task_id = int(cast(int, self._redis.incr(self._id_key())))
        task = _new_task(task_id, draft)
        payload = json.dumps(task.model_dump(mode="json"), separators=(",", ":"))
        p = self._redis.pipeline()
        p.hset(self._task_key(task.id), mapping={"json": payload})
        p.zadd(self._order_key(), {str(task.id): task.id})
        p.execute()
        return task

    def get(self, task_id: int) -> Task | None:
        raw = cast(bytes | None, self._redis.hget(self._task_key(task_id), "json"))
        if raw is None:
            return None
        return Task.model_validate(json.loads(raw.decode("utf-8")))

    def list_all(self) -> list[Task]:
        ids_bytes = cast(list[bytes], self._redis.zrange(self._order_key(), 0, -1))
        result: list[Task] = []
        for raw_id in ids_bytes:
            t = self.get(int(raw_id.decode("utf-8")))
            if t is not None:
                result.append(t)
        return result

    def update(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        current = self.get(task_id)
        if current is None:
            return None
        updated = _apply(current, changes)
        self._save(updated)
        return updated

    def delete(self, task_id: int) -> bool:
        p = self._redis.pipeline()
        p.delete(self._task_key(task_id))
        p.zrem(self._order_key(), str(task_id))
        res = p.execute()
        return bool(sum(int(x) for x in res))


__all__ = ["InMemoryTaskRepository", "RedisTaskRepository", "TaskRepository"]
