"""Composition helpers wiring domain objects and adapters for one output.

Purpose
-------
Translate an :class:`OutputConfig` into the live collaborators of a
:class:`~lib_udp_output.runtime.UdpOutput`: formatter, bounded queue, I/O
loop group, and sender worker. Keeping construction here lets tests swap in
their own pieces without touching the facade.
"""

from __future__ import annotations

from dataclasses import dataclass

from lib_udp_output.adapters import DEFAULT_CAPACITY, DatagramQueue, EventLoopGroup, SenderWorker
from lib_udp_output.adapters.queue import POLL_TIMEOUT_SECONDS
from lib_udp_output.domain import FieldFormatter, OutputConfig


@dataclass(slots=True)
class OutputComponents:
    """Aggregate of the collaborators owned by one output instance."""

    formatter: FieldFormatter
    queue: DatagramQueue
    loop_group: EventLoopGroup
    worker: SenderWorker


def build_components(
    config: OutputConfig,
    *,
    queue_maxsize: int = DEFAULT_CAPACITY,
    poll_timeout: float = POLL_TIMEOUT_SECONDS,
) -> OutputComponents:
    """Assemble formatter, queue, loop group, and worker for ``config``."""

    label = f"{config.host}:{config.port}"
    queue = DatagramQueue(maxsize=queue_maxsize, wake_interval=poll_timeout)
    return OutputComponents(
        formatter=FieldFormatter(config),
        queue=queue,
        loop_group=EventLoopGroup(name=f"udp-output-io-{label}"),
        worker=SenderWorker(queue, poll_timeout=poll_timeout, name=f"UDPSenderThread-{label}"),
    )


__all__ = ["OutputComponents", "build_components"]
