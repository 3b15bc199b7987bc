"""The UDP output facade exposed to host runtimes."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from concurrent.futures import Future
from types import TracebackType
from typing import Any

from lib_udp_output.adapters import CONNECT_TIMEOUT_SECONDS, DEFAULT_CAPACITY, ChannelOpener, QueueClosedError, open_udp_channel
from lib_udp_output.application.ports.channel import TransportChannelPort
from lib_udp_output.application.use_cases.reconnect import (
    MAX_RECONNECT_ATTEMPTS,
    RECONNECT_DELAY_SECONDS,
    ReconnectController,
)
from lib_udp_output.application.use_cases.shutdown import create_shutdown
from lib_udp_output.domain import OutputConfig, record_fields

from ._composition import build_components

LOGGER = logging.getLogger(__name__)

_IDLE_POLL_SECONDS = 0.01


class UdpOutput:
    """Forward field projections of log records to a collector over UDP.

    Lifecycle: construct, any number of :meth:`write` / :meth:`write_batch`
    calls, then :meth:`stop`. The transport is opened lazily on the first
    non-empty write; runtime transport failures are logged, never raised to
    writers.

    Examples
    --------
    >>> output = UdpOutput({"host": "127.0.0.1", "port": 12999, "params": "a,b", "separator": "|"})
    >>> output.is_running()
    True
    >>> output.write({})
    >>> output.initialized
    False
    >>> output.stop()
    >>> output.is_running()
    False
    """

    def __init__(
        self,
        config: OutputConfig | Mapping[str, Any],
        *,
        queue_maxsize: int = DEFAULT_CAPACITY,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
        max_reconnect_attempts: int = MAX_RECONNECT_ATTEMPTS,
        channel_opener: ChannelOpener = open_udp_channel,
    ) -> None:
        """Validate ``config`` and assemble the egress pipeline.

        Raises
        ------
        ConfigInvalidError
            When a required option is missing or malformed.
        """
        self._config = config if isinstance(config, OutputConfig) else OutputConfig.from_mapping(config)
        components = build_components(self._config, queue_maxsize=queue_maxsize)
        self._formatter = components.formatter
        self._queue = components.queue
        self._loop_group = components.loop_group
        self._worker = components.worker
        self._connect_timeout = connect_timeout
        self._channel_opener = channel_opener
        self._reconnect = ReconnectController(
            scheduler=self._loop_group,
            connect=self._create_channel,
            max_attempts=max_reconnect_attempts,
            delay=reconnect_delay,
        )
        self._channel: TransportChannelPort | None = None
        self._running = threading.Event()
        self._running.set()
        self._init_lock = threading.Lock()
        self._initialized = False
        self._shutdown = create_shutdown(
            worker=self._worker,
            queue=self._queue,
            loop_group=self._loop_group,
            current_channel=lambda: self._channel,
        )

    @property
    def config(self) -> OutputConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        """``True`` once the first channel creation has been triggered."""

        return self._initialized

    @property
    def pending(self) -> int:
        """Number of datagrams waiting in the hand-off queue."""

        return self._queue.qsize()

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect.attempts

    def is_running(self) -> bool:
        return self._running.is_set()

    def initialize(self) -> None:
        """Trigger the first channel creation on the I/O loop (once)."""

        with self._init_lock:
            if self._initialized:
                return
            self._loop_group.call_soon(self._create_channel)
            self._initialized = True

    def write(self, record: Any) -> None:
        """Format ``record`` and enqueue it for sending.

        Records that are ``None`` or carry no fields are dropped silently.
        Blocks while the queue is full.

        Raises
        ------
        QueueClosedError
            When the output is stopped while this call waits for queue space.
        """

        fields = record_fields(record)
        if not fields:
            return
        if not self._initialized:
            self.initialize()
        datagram = self._formatter.format(fields)
        self._queue.offer(datagram)

    def write_batch(self, records: Iterable[Any] | None) -> None:
        """Write each record in order; one failing record does not halt the batch."""

        if records is None:
            return
        for record in records:
            try:
                self.write(record)
            except QueueClosedError:
                raise
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("Dropping record that could not be written", exc_info=exc)

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued datagram has been handed to a channel.

        Returns ``True`` when the queue and the worker's lingering slot are
        empty, ``False`` when ``timeout`` elapsed first.
        """

        deadline = None if timeout is None else time.monotonic() + timeout
        while self._queue.qsize() or self._worker.lingering is not None:
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(_IDLE_POLL_SECONDS)
        return True

    def stop(self) -> None:
        """Stop sending, discard queued datagrams, and release the I/O loop."""

        if not self._running.is_set():
            return
        self._running.clear()
        self._shutdown()
        LOGGER.debug("UDP output for %s:%d stopped", self._config.host, self._config.port)

    def __enter__(self) -> "UdpOutput":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    # I/O loop callbacks -------------------------------------------------

    def _create_channel(self) -> None:
        if not self._running.is_set():
            return
        future: Future[Any] = self._channel_opener(
            self._loop_group,
            self._config.address,
            on_active=self._on_channel_active,
            on_inactive=self._on_channel_inactive,
            connect_timeout=self._connect_timeout,
        )
        future.add_done_callback(self._on_channel_opened)

    def _on_channel_opened(self, future: Future[Any]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            LOGGER.info("Connected to %s:%d", self._config.host, self._config.port)
            return
        LOGGER.error("Connection to %s:%d failed: %s", self._config.host, self._config.port, exc)
        if self._running.is_set():
            self._reconnect.schedule()

    def _on_channel_active(self, channel: TransportChannelPort) -> None:
        if not self._running.is_set():
            channel.close()
            return
        self._channel = channel
        self._worker.start(channel)

    def _on_channel_inactive(self, channel: TransportChannelPort) -> None:
        self._worker.detach(channel)
        if self._channel is channel:
            self._channel = None
        if self._running.is_set():
            self._reconnect.schedule()


__all__ = ["UdpOutput"]
