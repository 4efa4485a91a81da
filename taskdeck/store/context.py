from __future__ import annotations

import httpx

from taskdeck.api.client import TaskApiClient
from taskdeck.config import ClientConfig

from .notifications import Notifier
from .task_store import TaskStore


class StoreNotConfiguredError(RuntimeError):
    def __init__(self) -> None:
        super().__init__(
            "no TaskStore has been provided; build one with build_store() at startup "
            "and pass it to StoreContext.provide()"
        )


class StoreContext:
    """Holds the one TaskStore of a session and hands it to consumers.

    Built once at process start and passed explicitly to whatever needs the
    store. `require()` fails loudly when nothing was provided.
    """

    def __init__(self, store: TaskStore | None = None) -> None:
        self._store = store

    def provide(self, store: TaskStore) -> TaskStore:
        self._store = store
        return store

    def require(self) -> TaskStore:
        if self._store is None:
            raise StoreNotConfiguredError()
        return self._store

    @property
    def configured(self) -> bool:
        return self._store is not None

    def clear(self) -> None:
        self._store = None


def build_store(
    config: ClientConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    notifier: Notifier | None = None,
) -> TaskStore:
    api = TaskApiClient(config.api_url, timeout=config.timeout_s, transport=transport)
    return TaskStore(api, notifier=notifier)


__all__ = ["StoreContext", "StoreNotConfiguredError", "build_store"]
