from __future__ import annotations

import datetime as _dt
from collections.abc import Sequence

from taskdeck.models.task import Task
from taskdeck.store.task_store import TaskStore

NO_DUE_DATE = "No due date"
EMPTY_LIST = "No tasks yet."
LOADING = "Loading tasks..."


def filter_tasks(tasks: Sequence[Task], query: str) -> Sequence[Task]:
    """Tasks whose title or description contains `query`, case-insensitively.

    An empty query returns `tasks` itself. A missing description never matches.
    """
    if not query:
        return tasks
    needle = query.lower()
    return [
        t
        for t in tasks
        if needle in t.title.lower()
        or (t.description is not None and needle in t.description.lower())
    ]


def format_due_date(
    due_date: _dt.date | None, *, fmt: str = "%d.%m.%Y", placeholder: str = NO_DUE_DATE
) -> str:
    if due_date is None:
        return placeholder
    return due_date.strftime(fmt)


def status_marker(task: Task) -> str:
    return "[x]" if task.is_completed else "[ ]"


def render_task_line(task: Task, *, fmt: str = "%d.%m.%Y") -> str:
    due = format_due_date(task.due_date, fmt=fmt)
    return f"{status_marker(task)} #{task.id} {task.title} (due: {due})"


def render_task_detail(task: Task, *, fmt: str = "%d.%m.%Y") -> str:
    lines = [
        f"#{task.id} {task.title}",
        f"Status:   {task.status}",
        f"Due:      {format_due_date(task.due_date, fmt=fmt)}",
        f"Created:  {task.created_at.isoformat()}",
        f"Updated:  {task.updated_at.isoformat()}",
    ]
    if task.description:
        lines.extend(["", task.description])
    return "\n".join(lines)


def empty_list_message(store: TaskStore) -> str:
    return LOADING if store.loading else EMPTY_LIST


__all__ = [
    "filter_tasks",
    "format_due_date",
    "render_task_detail",
    "render_task_line",
    "status_marker",
    "empty_list_message",
]
