"""Port describing a live transport channel towards the collector."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Callable, Protocol, runtime_checkable

from lib_udp_output.domain.datagram import Datagram


class ChannelInactiveError(RuntimeError):
    """Raised when a write is submitted to a channel that is no longer active."""


@runtime_checkable
class TransportChannelPort(Protocol):
    """Datagram channel whose liveness can change underneath the writer."""

    def is_active(self) -> bool:
        """Return ``True`` while the channel can accept writes."""

    def write(self, datagram: Datagram) -> Future[None]:
        """Submit ``datagram`` asynchronously and return its completion future."""

    def close(self) -> None:
        """Close the channel; listeners observe the inactivation."""


ActiveCallback = Callable[[TransportChannelPort], None]
InactiveCallback = Callable[[TransportChannelPort], None]


__all__ = ["ActiveCallback", "ChannelInactiveError", "InactiveCallback", "TransportChannelPort"]
