"""Shutdown orchestration for the UDP output.

Purpose
-------
Provide one routine that stops the sender worker, closes the live channel,
discards queued datagrams, and releases the I/O loop, in that order, so that
nothing reaches the wire once the routine returns.
"""

from __future__ import annotations

import logging
from typing import Callable

from lib_udp_output.application.ports.channel import TransportChannelPort
from lib_udp_output.application.ports.lifecycle import GracefulShutdownPort, StoppablePort
from lib_udp_output.application.ports.queue import DatagramQueuePort

LOGGER = logging.getLogger(__name__)


def create_shutdown(
    *,
    worker: StoppablePort | None,
    queue: DatagramQueuePort,
    loop_group: GracefulShutdownPort | None,
    current_channel: Callable[[], TransportChannelPort | None],
) -> Callable[[], int]:
    """Return a callable performing the shutdown sequence.

    The callable returns the number of queued datagrams that were discarded.
    """

    def shutdown() -> int:
        """Stop the worker, close the channel, drop pending datagrams, release the loop."""
        if worker is not None:
            worker.stop()
        channel = current_channel()
        if channel is not None:
            channel.close()
        discarded = queue.close()
        if discarded:
            LOGGER.info("Discarded %d queued datagram(s) on shutdown", discarded)
        if loop_group is not None:
            loop_group.shutdown_gracefully()
        return discarded

    return shutdown


__all__ = ["create_shutdown"]
