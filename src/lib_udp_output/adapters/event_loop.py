"""Asyncio event loop running on a dedicated thread.

Purpose
-------
Back every transport channel of one output instance with a single I/O loop
and provide the delayed-task facility used by the reconnect controller.

Contents
--------
* :class:`EventLoopGroup` - owns the loop, its thread, and pending timers.

System Role
-----------
All endpoint creation, channel callbacks, socket writes, and reconnect
timers execute on this loop. Producers and the sender worker interact with it
only through the thread-safe ``submit``/``call_soon``/``schedule`` helpers.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Coroutine, TypeVar

from lib_udp_output.application.ports.scheduler import SchedulerPort

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class EventLoopGroup(SchedulerPort):
    """Own an asyncio loop driven by a background daemon thread.

    The thread starts lazily on first use and is released by
    :meth:`shutdown_gracefully`, which also cancels timers that have not fired.

    Examples
    --------
    >>> group = EventLoopGroup()
    >>> async def answer():
    ...     return 42
    >>> group.submit(answer()).result(timeout=1)
    42
    >>> group.shutdown_gracefully()
    >>> group.schedule(0.01, lambda: None)
    False
    """

    def __init__(self, *, name: str = "udp-output-io", shutdown_timeout: float = 5.0) -> None:
        self._name = name
        self._shutdown_timeout = shutdown_timeout
        self._loop = asyncio.new_event_loop()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._shutting_down = False
        self._timers: set[asyncio.TimerHandle] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    def in_loop_thread(self) -> bool:
        """Return ``True`` when called from the loop's own thread."""

        thread = self._thread
        return thread is not None and thread.ident == threading.get_ident()

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        """Run ``coro`` on the loop and return a thread-safe future."""

        if not self._ensure_started():
            coro.close()
            raise RuntimeError("event loop group has been shut down")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> bool:
        """Queue ``callback(*args)`` for the next loop iteration.

        Returns ``False`` once the group is shutting down.
        """

        if not self._ensure_started():
            return False
        self._loop.call_soon_threadsafe(self._guarded, callback, *args)
        return True

    def schedule(self, delay: float, callback: Callable[[], None]) -> bool:
        """Run ``callback`` on the loop after ``delay`` seconds."""

        if not self._ensure_started():
            LOGGER.debug("Event loop is shutting down; not scheduling %r", callback)
            return False
        self._loop.call_soon_threadsafe(self._arm_timer, delay, callback)
        return True

    def shutdown_gracefully(self, timeout: float | None = None) -> None:
        """Cancel pending timers and tasks, stop the loop, and join its thread."""

        with self._lock:
            if self._shutting_down:
                return
            self._shutting_down = True
            thread = self._thread
        effective_timeout = self._shutdown_timeout if timeout is None else timeout
        if thread is None:
            self._loop.close()
            return
        if thread is threading.current_thread():
            self._loop.call_soon(self._loop.stop)
            return
        try:
            asyncio.run_coroutine_threadsafe(self._drain(), self._loop).result(effective_timeout)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Event loop drain did not complete cleanly: %r", exc)
        self._loop.call_soon_threadsafe(self._loop.stop)
        thread.join(effective_timeout)
        if thread.is_alive():
            LOGGER.warning("Event loop thread %s did not stop within %.1fs", self._name, effective_timeout)

    def _ensure_started(self) -> bool:
        with self._lock:
            if self._shutting_down:
                return False
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()
            return True

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            try:
                self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            finally:
                self._loop.close()
                LOGGER.debug("Event loop %s closed", self._name)

    def _arm_timer(self, delay: float, callback: Callable[[], None]) -> None:
        if self._shutting_down:
            return

        def fire() -> None:
            self._timers.discard(handle)
            self._guarded(callback)

        handle = self._loop.call_later(delay, fire)
        self._timers.add(handle)

    async def _drain(self) -> None:
        for handle in list(self._timers):
            handle.cancel()
        self._timers.clear()
        current = asyncio.current_task()
        pending = [task for task in asyncio.all_tasks(self._loop) if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    @staticmethod
    def _guarded(callback: Callable[..., Any], *args: Any) -> None:
        try:
            callback(*args)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Event loop callback %r raised; continuing", callback, exc_info=exc)


__all__ = ["EventLoopGroup"]
