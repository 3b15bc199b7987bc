"""Ports for collaborators that take part in the shutdown sequence."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StoppablePort(Protocol):
    """Background component that can be told to stop."""

    def stop(self) -> None: ...


@runtime_checkable
class GracefulShutdownPort(Protocol):
    """Executor releasing its threads and pending timers."""

    def shutdown_gracefully(self) -> None: ...


__all__ = ["GracefulShutdownPort", "StoppablePort"]
