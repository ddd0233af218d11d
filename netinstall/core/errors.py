"""Failure taxonomy of the group loader.

Each error class carries the `Status` it turns into once it is caught by
`NetInstallConfig`. None of them is retried.
"""

from __future__ import annotations

from typing import ClassVar

from netinstall.core.status import Status


class NetInstallError(Exception):
    status: ClassVar[Status] = Status.FAILED_INTERNAL_ERROR

    def __init__(self, message: str, data: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data or {}

    def to_dict(self) -> dict[str, object]:
        return {"status": self.status.value, "message": self.message, "data": self.data}


class ConfigurationError(NetInstallError, ValueError):
    """Missing or malformed configuration, or a URL that cannot be fetched."""

    status = Status.FAILED_BAD_CONFIGURATION


class TransportError(NetInstallError):
    """The request failed on the wire (connection, timeout, HTTP status)."""

    status = Status.FAILED_NETWORK_ERROR


class DataError(NetInstallError):
    """The received document is not valid YAML."""

    status = Status.FAILED_BAD_DATA

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        explanation: str = "",
    ) -> None:
        super().__init__(message, {"line": line, "column": column})
        self.line = line
        self.column = column
        self.explanation = explanation


class InternalError(NetInstallError):
    """A completion arrived without a matching finished request."""

    status = Status.FAILED_INTERNAL_ERROR
