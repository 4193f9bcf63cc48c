"""Lifecycle status and error records for cloud instances."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

__all__ = [
    "InstanceStatus",
    "CloudErrorInfo",
]


class InstanceStatus(StrEnum):
    """Observable lifecycle status of a cloud instance.

    ERROR is never stored; it is reported whenever an error has been recorded.
    """

    SCHEDULED_TO_START = "scheduled_to_start"
    STARTING = "starting"
    RUNNING = "running"
    RESTARTING = "restarting"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class CloudErrorInfo:
    """Most recent unrecovered failure of an instance."""

    message: str
    details: str = ""
    cause: BaseException | None = field(default=None, compare=False)

    @classmethod
    def from_exception(cls, error: BaseException) -> CloudErrorInfo:
        message = str(error) or type(error).__name__
        return cls(
            message=message,
            details=f"{type(error).__name__}: {message}",
            cause=error,
        )
