from __future__ import annotations

import os

import uvicorn

from taskdeck.config import ServerConfig, load_server_config
from taskdeck.observability import get_json_logger

from .app import create_app
from .repository import InMemoryTaskRepository, RedisTaskRepository, TaskRepository


def build_repository(cfg: ServerConfig) -> TaskRepository:
    if cfg.redis_url:
        return RedisTaskRepository(url=cfg.redis_url, key_prefix=cfg.redis_prefix)
    return InMemoryTaskRepository()


def serve(host: str | None = None, port: int | None = None) -> None:
    cfg = load_server_config()
    repository = build_repository(cfg)
    get_json_logger("taskdeck.devserver").info(
        "dev server starting",
        extra={
            "event": "devserver_start",
            "service": "devserver",
            "attributes": {
                "host": host or cfg.host,
                "port": port or cfg.port,
                "repository": type(repository).__name__,
            },
        },
    )
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(repository),
            host=host or cfg.host,
            port=port or cfg.port,
            log_level=os.getenv("LOG_LEVEL", "info").lower(),
        )
    )
    server.run()


if __name__ == "__main__":
    serve()
