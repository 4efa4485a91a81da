from __future__ import annotations

from .context import StoreContext, StoreNotConfiguredError, build_store
from .notifications import CollectingNotifier, LoggingNotifier, Notification, Notifier
from .task_store import StorePhase, TaskStore

__all__ = [
    "CollectingNotifier",
    "LoggingNotifier",
    "Notification",
    "Notifier",
    "StoreContext",
    "StoreNotConfiguredError",
    "StorePhase",
    "TaskStore",
    "build_store",
]
