"""Protocols the application layer depends on."""

from __future__ import annotations

from .channel import ActiveCallback, ChannelInactiveError, InactiveCallback, TransportChannelPort
from .lifecycle import GracefulShutdownPort, StoppablePort
from .queue import DatagramQueuePort
from .scheduler import SchedulerPort

__all__ = [
    "ActiveCallback",
    "ChannelInactiveError",
    "DatagramQueuePort",
    "GracefulShutdownPort",
    "InactiveCallback",
    "SchedulerPort",
    "StoppablePort",
    "TransportChannelPort",
]
