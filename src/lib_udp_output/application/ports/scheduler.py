"""Port for the delayed-task facility of the I/O event loop."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class SchedulerPort(Protocol):
    """Run callbacks on the I/O loop after a delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> bool:
        """Arm ``callback`` to run after ``delay`` seconds.

        Returns ``False`` when the scheduler is shutting down and the callback
        was not armed.
        """


__all__ = ["SchedulerPort"]
