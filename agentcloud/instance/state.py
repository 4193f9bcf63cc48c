"""Status register and error slot of a cloud instance.

Reads are plain attribute loads and never block. Writers to the register go
through a condition so that waiters wake on every change.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from agentcloud.types.status import CloudErrorInfo, InstanceStatus

__all__ = [
    "StatusRegister",
    "ErrorSlot",
]


class StatusRegister:
    """Holds the last explicitly set lifecycle status."""

    __slots__ = ("_value", "_changed")

    def __init__(self, initial: InstanceStatus = InstanceStatus.SCHEDULED_TO_START) -> None:
        self._value = initial
        self._changed = threading.Condition()

    def get(self) -> InstanceStatus:
        return self._value

    def set(self, status: InstanceStatus) -> None:
        with self._changed:
            self._value = status
            self._changed.notify_all()

    def compare_and_set(self, expected: InstanceStatus, status: InstanceStatus) -> bool:
        with self._changed:
            if self._value is not expected:
                return False
            self._value = status
            self._changed.notify_all()
            return True

    def set_unless(self, status: InstanceStatus, blocked: frozenset[InstanceStatus]) -> bool:
        """Set ``status`` unless the stored status is one of ``blocked``."""
        with self._changed:
            if self._value in blocked:
                return False
            self._value = status
            self._changed.notify_all()
            return True

    def notify(self) -> None:
        """Wake waiters whose predicate depends on state held elsewhere."""
        with self._changed:
            self._changed.notify_all()

    def wait_for(
        self,
        predicate: Callable[[InstanceStatus], bool],
        timeout: float,
    ) -> bool:
        """Block until ``predicate`` holds for the stored status.

        Returns False if ``timeout`` seconds pass first.
        """
        deadline = time.monotonic() + timeout
        with self._changed:
            while not predicate(self._value):
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._changed.wait(remaining)
            return True


class ErrorSlot:
    """Holds the most recent error. Never cleared once set."""

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value: CloudErrorInfo | None = None

    def get(self) -> CloudErrorInfo | None:
        return self._value

    def record(self, info: CloudErrorInfo) -> None:
        self._value = info