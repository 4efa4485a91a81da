from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskdeck.models.task import TaskDraft, TaskStatus
from taskdeck.observability import configure_uvicorn_logging, get_json_logger, get_metrics

from .repository import TaskRepository

TASKS_PATH = "/api/tasks"


class TaskPatch(BaseModel):
    """Partial update body; only the fields present are changed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    description: str | None = None
    due_date: str | None = None
    status: TaskStatus | None = None


def create_app(repository: TaskRepository) -> FastAPI:
    app = FastAPI(title="taskdeck dev server")
    # Configure uvicorn logging at app creation to avoid import-time side effects
    configure_uvicorn_logging()
    logger = get_json_logger("taskdeck.devserver")
    metrics = get_metrics()

    def _log(event: str, msg: str, **fields: Any) -> None:
        logger.info(msg, extra={"event": event, "service": "devserver", **fields})
        metrics.increment("devserver_requests", {"event": event})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(TASKS_PATH)
    async def list_tasks() -> list[dict[str, Any]]:
        tasks = repository.list_all()
        _log("tasks_listed", "tasks listed", task_count=len(tasks))
        return [t.to_wire() for t in tasks]

    @app.get(TASKS_PATH + "/{task_id}")
    async def get_task(task_id: int) -> dict[str, Any]:
        task = repository.get(task_id)
        if task is None:
            raise HTTPException(status_code=404, detail="task not found")
        return task.to_wire()

    @app.post(TASKS_PATH, status_code=201)
    async def create_task(draft: TaskDraft) -> dict[str, Any]:
        if not draft.title.strip():
            raise HTTPException(status_code=400, detail="title must be non-empty")
        task = repository.create(draft)
        _log("task_created", "task created", task_id=task.id)
        return task.to_wire()

    @app.put(TASKS_PATH + "/{task_id}")
    async def update_task(task_id: int, patch: TaskPatch) -> dict[str, Any]:
        # Explicit nulls only clear the optional fields
        changes = {
            k: v
            for k, v in patch.model_dump(exclude_unset=True).items()
            if v is not None or k in {"description", "due_date"}
        }
        if not changes:
            raise HTTPException(status_code=400, detail="no fields to update")
        if "title" in changes and not (changes["title"] or "").strip():
            raise HTTPException(status_code=400, detail="title must be non-empty")
        task = repository.update(task_id, changes)
        if task is None:
            raise HTTPException(status_code=404, detail="task not found")
        _log(
            "task_updated", "task updated", task_id=task_id, attributes={"fields": sorted(changes)}
        )
        return task.to_wire()

    @app.delete(TASKS_PATH + "/{task_id}", status_code=204)
    async def delete_task(task_id: int) -> Response:
        if not repository.delete(task_id):
            raise HTTPException(status_code=404, detail="task not found")
        _log("task_deleted", "task deleted", task_id=task_id)
        return Response(status_code=204)

    return app


__all__ = ["TASKS_PATH", "TaskPatch", "create_app"]
