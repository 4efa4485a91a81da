from __future__ import annotations

import datetime as _dt
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

TaskStatus = Literal["Pending", "Completed"]

TASK_STATUSES: tuple[TaskStatus, ...] = ("Pending", "Completed")


def _coerce_due_date(value: Any) -> Any:
    # JS backends serialize dates as full timestamps ("2025-01-02T00:00:00.000Z")
    if isinstance(value, str) and "T" in value:
        v = value.replace("Z", "+00:00")
        return _dt.datetime.fromisoformat(v).date()
    if isinstance(value, _dt.datetime):
        return value.date()
    return value


class _WireModel(BaseModel):
    """Base for models exchanged with the tasks API.

    Python attributes are snake_case; the wire uses camelCase. Both names
    are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Task(_WireModel):
    """One task as last reported by the server.

    - `id`, `created_at` and `updated_at` are server-assigned
    - Records are frozen; the store replaces them, never edits them
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    title: str
    description: str | None = None
    due_date: _dt.date | None = None
    status: TaskStatus = "Pending"
    created_at: _dt.datetime
    updated_at: _dt.datetime

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, value: Any) -> Any:
        return _coerce_due_date(value)

    @property
    def is_completed(self) -> bool:
        return self.status == "Completed"


class TaskDraft(_WireModel):
    """Creation payload. Status is left to the server."""

    title: str
    description: str = ""
    due_date: _dt.date | None = None

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, value: Any) -> Any:
        return _coerce_due_date(value)


class StatusUpdate(_WireModel):
    """Partial update carrying only the new status."""

    status: TaskStatus


_TASK_LIST = TypeAdapter(list[Task])


def parse_task_list(payload: Any) -> list[Task]:
    return _TASK_LIST.validate_python(payload)


__all__ = [
    "TASK_STATUSES",
    "StatusUpdate",
    "Task",
    "TaskDraft",
    "TaskStatus",
    "parse_task_list",
]
