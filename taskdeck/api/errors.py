from __future__ import annotations

from typing import ClassVar, Literal

ErrorKind = Literal["api", "network", "server", "input"]


class TaskApiError(Exception):
    """Base for failures talking to the tasks API."""

    kind: ClassVar[ErrorKind] = "api"

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation


class NetworkFailure(TaskApiError):
    """The request could not be sent, or the response body could not be parsed."""

    kind: ClassVar[ErrorKind] = "network"


class ServerRejection(TaskApiError):
    """A response arrived but does not carry the operation's success signal."""

    kind: ClassVar[ErrorKind] = "server"

    def __init__(self, operation: str, status_code: int, message: str | None = None) -> None:
        super().__init__(operation, message or f"{operation} rejected with HTTP {status_code}")
        self.status_code = status_code


class InvalidRequest(TaskApiError):
    """The request payload could not be built from the caller's input; nothing was sent."""

    kind: ClassVar[ErrorKind] = "input"


__all__ = ["ErrorKind", "InvalidRequest", "NetworkFailure", "ServerRejection", "TaskApiError"]
