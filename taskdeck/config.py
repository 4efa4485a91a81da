from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from taskdeck.api.client import DEFAULT_API_URL

DEFAULT_DATE_FORMAT = "%d.%m.%Y"
DEFAULT_SERVER_PORT = 3000


@dataclass(slots=True)
class ClientConfig:
    api_url: str
    timeout_s: float | None
    date_format: str


@dataclass(slots=True)
class ServerConfig:
    host: str
    port: int
    redis_url: str | None
    redis_prefix: str


def _merged_env(env: dict[str, str] | None) -> dict[str, Any]:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    return e


def _parse_timeout(raw: str | None) -> float | None:
    # Unset or non-positive means no timeout
    value = (raw or "").strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds > 0 else None


def _parse_port(raw: str | None, default: int) -> int:
    value = (raw or "").strip()
    try:
        port = int(value) if value else default
    except ValueError:
        return default
    return port if 0 < port < 65536 else default


def load_config(env: dict[str, str] | None = None) -> ClientConfig:
    e = _merged_env(env)
    return ClientConfig(
        api_url=(e.get("TASKDECK_API_URL") or "").strip() or DEFAULT_API_URL,
        timeout_s=_parse_timeout(e.get("TASKDECK_HTTP_TIMEOUT")),
        date_format=e.get("TASKDECK_DATE_FORMAT") or DEFAULT_DATE_FORMAT,
    )


def load_server_config(env: dict[str, str] | None = None) -> ServerConfig:
    e = _merged_env(env)
    return ServerConfig(
        host=e.get("TASKDECK_SERVER_HOST", "127.0.0.1"),
        port=_parse_port(e.get("TASKDECK_SERVER_PORT"), DEFAULT_SERVER_PORT),
        redis_url=(e.get("REDIS_URL") or "").strip() or None,
        redis_prefix=e.get("TASKDECK_REDIS_PREFIX", "taskdeck"),
    )


__all__ = ["ClientConfig", "ServerConfig", "load_config", "load_server_config"]
