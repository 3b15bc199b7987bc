"""Bounded FIFO hand-off between producer threads and the sender worker.

Purpose
-------
Shield the upstream pipeline from transient channel problems for a while
without risking unbounded memory growth: producers block once the buffer is
full instead of piling up datagrams.

Contents
--------
* :class:`DatagramQueue` - thread-safe implementation of :class:`DatagramQueuePort`.
* :class:`QueueClosedError` - raised to producers blocked on a closed queue.

System Role
-----------
The only synchronisation point touched by producer threads. The sender worker
drains it with short bounded polls so it can keep re-checking its stop flag
and the channel liveness.
"""

from __future__ import annotations

import logging
import queue
import threading
import time

from lib_udp_output.application.ports.queue import DatagramQueuePort
from lib_udp_output.domain.datagram import Datagram

LOGGER = logging.getLogger(__name__)

DEFAULT_CAPACITY = 512
POLL_TIMEOUT_SECONDS = 0.1


class QueueClosedError(RuntimeError):
    """Raised when offering to, or blocking on, a queue that has been closed."""


class DatagramQueue(DatagramQueuePort):
    """Blocking bounded queue of :class:`Datagram` objects.

    Examples
    --------
    >>> buffer = DatagramQueue(maxsize=1)
    >>> buffer.offer(Datagram(b"a\\r\\n", ("127.0.0.1", 514)))
    True
    >>> buffer.offer(Datagram(b"b\\r\\n", ("127.0.0.1", 514)), timeout=0.01)
    False
    >>> buffer.poll(0.01).payload
    b'a\\r\\n'
    >>> buffer.poll(0.01) is None
    True
    """

    def __init__(self, *, maxsize: int = DEFAULT_CAPACITY, wake_interval: float = POLL_TIMEOUT_SECONDS) -> None:
        """Create the queue.

        Parameters
        ----------
        maxsize:
            Capacity; offers block once this many datagrams are pending.
        wake_interval:
            How often (seconds) a blocked producer re-checks whether the queue
            was closed underneath it.
        """
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        if wake_interval <= 0:
            raise ValueError("wake_interval must be positive")
        self._queue: queue.Queue[Datagram] = queue.Queue(maxsize=maxsize)
        self._maxsize = maxsize
        self._wake_interval = wake_interval
        self._closed = threading.Event()

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def qsize(self) -> int:
        """Return the approximate number of pending datagrams."""

        return self._queue.qsize()

    def offer(self, datagram: Datagram, timeout: float | None = None) -> bool:
        """Enqueue ``datagram``, blocking while the queue is full.

        ``timeout=None`` waits indefinitely. Returns ``False`` when a finite
        timeout elapses before space frees up.

        Raises
        ------
        QueueClosedError
            When the queue is closed before or while the producer waits.
        """

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if self._closed.is_set():
                raise QueueClosedError("queue is closed")
            wait = self._wake_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return self._offer_nowait(datagram)
                wait = min(wait, remaining)
            try:
                self._queue.put(datagram, timeout=wait)
            except queue.Full:
                continue
            if self._closed.is_set():
                self._discard_pending()
                raise QueueClosedError("queue was closed while the producer waited")
            return True

    def poll(self, timeout: float = POLL_TIMEOUT_SECONDS) -> Datagram | None:
        """Return the oldest datagram, or ``None`` once ``timeout`` elapses."""

        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> int:
        """Close the queue and discard pending datagrams.

        Returns the number of datagrams discarded. Blocked producers wake up
        within ``wake_interval`` and raise :class:`QueueClosedError`.
        """

        self._closed.set()
        discarded = self._discard_pending()
        if discarded:
            LOGGER.debug("Dropped %d pending datagram(s) while closing the queue", discarded)
        return discarded

    def _discard_pending(self) -> int:
        # Leaves ``not_full`` unsignalled; blocked producers re-check the flag.
        with self._queue.mutex:
            discarded = len(self._queue.queue)
            self._queue.queue.clear()
        return discarded

    def _offer_nowait(self, datagram: Datagram) -> bool:
        try:
            self._queue.put_nowait(datagram)
        except queue.Full:
            return False
        return True


__all__ = ["DEFAULT_CAPACITY", "DatagramQueue", "POLL_TIMEOUT_SECONDS", "QueueClosedError"]
