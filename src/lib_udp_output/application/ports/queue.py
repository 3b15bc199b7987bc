"""Port describing the bounded hand-off queue between producers and the sender."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_udp_output.domain.datagram import Datagram


@runtime_checkable
class DatagramQueuePort(Protocol):
    """FIFO buffer separating producer threads from the sender worker."""

    def offer(self, datagram: Datagram, timeout: float | None = None) -> bool:
        """Enqueue ``datagram``, blocking while the queue is full."""

    def poll(self, timeout: float = 0.1) -> Datagram | None:
        """Return the next datagram or ``None`` once ``timeout`` elapses."""

    def close(self) -> int:
        """Reject further offers and discard pending datagrams."""


__all__ = ["DatagramQueuePort"]
