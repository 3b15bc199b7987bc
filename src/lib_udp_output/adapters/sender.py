"""Single-threaded sender draining the queue into the live channel.

Purpose
-------
Move datagrams from :class:`~lib_udp_output.adapters.queue.DatagramQueue` to
the current transport channel, one at a time, and only while that channel is
active.

Contents
--------
* :class:`WorkerState` - externally observable worker states.
* :class:`SenderWorker` - the worker thread and its waiting/draining loop.

System Role
-----------
Registered with the channel by the ``on_active`` callback and detached by
``on_inactive``. The channel reference and the condition variable share one
mutex; the running flag is a :class:`threading.Event`.

Alignment Notes
---------------
A datagram dequeued just before the channel goes away is held in a single
lingering slot and written first once a channel becomes active again.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from enum import Enum

from lib_udp_output.application.ports.channel import ChannelInactiveError, TransportChannelPort
from lib_udp_output.application.ports.queue import DatagramQueuePort
from lib_udp_output.domain.datagram import Datagram

from .queue import POLL_TIMEOUT_SECONDS

LOGGER = logging.getLogger(__name__)


class WorkerState(Enum):
    """Lifecycle of the sender worker."""

    WAITING_FOR_CHANNEL = "waiting_for_channel"
    DRAINING = "draining"
    STOPPED = "stopped"


class SenderWorker:
    """Drain queued datagrams into whichever channel is currently registered.

    Examples
    --------
    >>> from lib_udp_output.adapters.queue import DatagramQueue
    >>> worker = SenderWorker(DatagramQueue())
    >>> worker.state
    <WorkerState.WAITING_FOR_CHANNEL: 'waiting_for_channel'>
    >>> worker.stop()
    >>> worker.state
    <WorkerState.STOPPED: 'stopped'>
    """

    def __init__(
        self,
        queue: DatagramQueuePort,
        *,
        poll_timeout: float = POLL_TIMEOUT_SECONDS,
        stop_timeout: float | None = 5.0,
        name: str = "UDPSenderThread",
    ) -> None:
        self._queue = queue
        self._poll_timeout = poll_timeout
        self._stop_timeout = stop_timeout
        self._name = name
        self._lock = threading.Lock()
        self._connected = threading.Condition(self._lock)
        self._channel: TransportChannelPort | None = None
        self._keep_running = threading.Event()
        self._keep_running.set()
        self._thread: threading.Thread | None = None
        self._lingering: Datagram | None = None
        self._state = WorkerState.WAITING_FOR_CHANNEL

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def lingering(self) -> Datagram | None:
        """Datagram dequeued but not yet handed to a channel, if any."""

        return self._lingering

    @property
    def is_alive(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def channel(self) -> TransportChannelPort | None:
        with self._lock:
            return self._channel

    def start(self, channel: TransportChannelPort) -> None:
        """Register ``channel`` and make sure the worker thread runs.

        The thread is created on the first call only; later calls just swap
        the channel and wake the waiting worker.
        """

        with self._connected:
            if not self._keep_running.is_set():
                LOGGER.debug("Ignoring channel registration on a stopped sender")
                return
            self._channel = channel
            self._connected.notify_all()
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()

    def detach(self, channel: TransportChannelPort | None = None) -> None:
        """Forget the registered channel.

        When ``channel`` is given the registration is only cleared if it still
        refers to that channel, so a late inactivation of an old channel does
        not unregister its replacement.
        """

        with self._connected:
            if channel is None or self._channel is channel:
                self._channel = None

    def stop(self, timeout: float | None = None) -> None:
        """Signal the worker to exit and wait for the thread to finish."""

        self._keep_running.clear()
        with self._connected:
            self._connected.notify_all()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self._stop_timeout if timeout is None else timeout)
            if thread.is_alive():
                LOGGER.warning("%s did not stop within the allotted timeout", self._name)
        self._lingering = None
        self._state = WorkerState.STOPPED

    def _run(self) -> None:
        """Worker loop alternating between waiting for a channel and draining."""
        while self._keep_running.is_set():
            channel = self._await_channel()
            if channel is None:
                break
            if self._lingering is None:
                self._lingering = self._queue.poll(self._poll_timeout)
            if self._lingering is None:
                continue
            if not channel.is_active():
                LOGGER.debug("Channel went inactive; holding one datagram until it is back")
                continue
            self._submit(channel, self._lingering)
        self._state = WorkerState.STOPPED
        LOGGER.debug("%s exiting", self._name)

    def _await_channel(self) -> TransportChannelPort | None:
        """Block until a registered channel is active or the worker is stopped."""

        with self._connected:
            while self._keep_running.is_set() and not self._channel_ready():
                self._state = WorkerState.WAITING_FOR_CHANNEL
                self._connected.wait(self._poll_timeout)
            if not self._keep_running.is_set():
                return None
            self._state = WorkerState.DRAINING
            return self._channel

    def _channel_ready(self) -> bool:
        channel = self._channel
        return channel is not None and channel.is_active()

    def _submit(self, channel: TransportChannelPort, datagram: Datagram) -> None:
        try:
            future = channel.write(datagram)
        except ChannelInactiveError:
            LOGGER.debug("Channel closed before the write was submitted; retrying after reconnect")
            return
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Submitting datagram failed; dropping it", exc_info=exc)
            self._lingering = None
            return
        self._lingering = None
        future.add_done_callback(_log_completion)


def _log_completion(future: Future[None]) -> None:
    """Report the outcome of an asynchronous write; failures are not retried."""

    if future.cancelled():
        LOGGER.error("Write cancelled")
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error("Write failed: %s", exc)
    else:
        LOGGER.debug("Write succeeded")


__all__ = ["SenderWorker", "WorkerState"]
