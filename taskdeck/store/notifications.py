from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from taskdeck.api.errors import ErrorKind, TaskApiError
from taskdeck.observability import get_json_logger

ERROR_TITLE = "Error"

MESSAGES: dict[str, str] = {
    "list": "Failed to load tasks.",
    "create": "Task could not be saved.",
    "update_status": "Task status could not be updated.",
    "delete": "Task could not be deleted.",
}


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    message: str
    operation: str
    kind: ErrorKind


def notification_for(error: TaskApiError) -> Notification:
    message = MESSAGES.get(error.operation, "Something went wrong.")
    return Notification(ERROR_TITLE, message, error.operation, error.kind)


class Notifier(Protocol):
    """Surface a failure to the user. Rendering is up to the presentation layer."""

    def notify(self, notification: Notification) -> None: ...


class LoggingNotifier:
    def __init__(self) -> None:
        self._logger = get_json_logger("taskdeck.notify")

    def notify(self, notification: Notification) -> None:
        self._logger.warning(
            notification.message,
            extra={
                "event": "user_notification",
                "operation": notification.operation,
                "error_kind": notification.kind,
            },
        )


class CollectingNotifier:
    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def drain(self) -> list[Notification]:
        out, self.notifications = self.notifications, []
        return out


__all__ = [
    "CollectingNotifier",
    "LoggingNotifier",
    "Notification",
    "Notifier",
    "notification_for",
]
