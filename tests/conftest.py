from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio

from taskdeck.api.client import TaskApiClient
from taskdeck.observability import get_json_logger, reset_metrics
from taskdeck.store import CollectingNotifier, TaskStore
from tests.helpers.fake_api import BASE_URL, FakeTasksApi


@pytest.fixture(scope="session", autouse=True)
def _bind_loggers_to_session_stdout() -> None:
    """Create the package loggers before any capsys test swaps sys.stdout."""
    for name in (
        "taskdeck.api",
        "taskdeck.store",
        "taskdeck.notify",
        "taskdeck.devserver",
    ):
        get_json_logger(name)


@pytest.fixture(autouse=True)
def _fresh_metrics() -> None:
    reset_metrics()


@pytest.fixture()
def fake_api() -> FakeTasksApi:
    return FakeTasksApi()


@pytest.fixture()
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture()
def make_store(
    notifier: CollectingNotifier,
) -> Callable[[FakeTasksApi], TaskStore]:
    def _make(api: FakeTasksApi) -> TaskStore:
        client = TaskApiClient(BASE_URL, transport=api.transport())
        return TaskStore(client, notifier=notifier)

    return _make


@pytest_asyncio.fixture()
async def store(
    fake_api: FakeTasksApi, make_store: Callable[[FakeTasksApi], TaskStore]
) -> AsyncGenerator[TaskStore, None]:
    s = make_store(fake_api)
    yield s
    await s.aclose()


def _redis_ping(url: str) -> bool:
    try:
        import redis

        return bool(redis.Redis.from_url(url).ping())
    except Exception:
        return False


@pytest.fixture(scope="session")
def redis_url() -> str:
    """Reachable Redis URL from REDIS_URL or localhost; skip otherwise."""
    for url in (os.getenv("REDIS_URL"), "redis://localhost:6379/0"):
        if url and _redis_ping(url):
            return url
    pytest.skip("Redis not available; set REDIS_URL or start local Redis")
