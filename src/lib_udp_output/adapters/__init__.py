"""Concrete adapters: queue, sender worker, I/O loop, and UDP transport."""

from __future__ import annotations

from .event_loop import EventLoopGroup
from .queue import DEFAULT_CAPACITY, DatagramQueue, QueueClosedError
from .sender import SenderWorker, WorkerState
from .transport import CONNECT_TIMEOUT_SECONDS, ChannelOpener, UdpChannel, open_udp_channel

__all__ = [
    "CONNECT_TIMEOUT_SECONDS",
    "ChannelOpener",
    "DEFAULT_CAPACITY",
    "DatagramQueue",
    "EventLoopGroup",
    "QueueClosedError",
    "SenderWorker",
    "UdpChannel",
    "WorkerState",
    "open_udp_channel",
]
