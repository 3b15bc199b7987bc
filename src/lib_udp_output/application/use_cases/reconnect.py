"""Bounded reconnect policy for the transport channel.

Purpose
-------
Re-create the transport channel after a bind failure or an inactivation,
waiting a fixed delay between attempts and giving up after a fixed number of
attempts over the lifetime of one output instance.

System Role
-----------
Triggered from I/O loop callbacks; the scheduled attempts run on the same
loop, so the attempt counter is only ever touched from that thread.
"""

from __future__ import annotations

import logging
from typing import Callable

from lib_udp_output.application.ports.scheduler import SchedulerPort

LOGGER = logging.getLogger(__name__)

MAX_RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY_SECONDS = 1.0


class ReconnectController:
    """Schedule channel re-creation with a lifetime attempt budget.

    The counter is incremented at the start of each attempt and never reset,
    so a successful reconnect still consumes budget.

    Examples
    --------
    >>> class InlineScheduler:
    ...     def schedule(self, delay, callback):
    ...         callback()
    ...         return True
    >>> attempts = []
    >>> controller = ReconnectController(
    ...     scheduler=InlineScheduler(), connect=lambda: attempts.append(1), max_attempts=2
    ... )
    >>> [controller.schedule() for _ in range(3)]
    [True, True, False]
    >>> len(attempts), controller.exhausted
    (2, True)
    """

    def __init__(
        self,
        *,
        scheduler: SchedulerPort,
        connect: Callable[[], None],
        max_attempts: int = MAX_RECONNECT_ATTEMPTS,
        delay: float = RECONNECT_DELAY_SECONDS,
    ) -> None:
        if max_attempts < 0:
            raise ValueError("max_attempts must be zero or positive")
        if delay < 0:
            raise ValueError("delay must be zero or positive")
        self._scheduler = scheduler
        self._connect = connect
        self._max_attempts = max_attempts
        self._delay = delay
        self._attempts = 0
        self._exhaustion_logged = False

    @property
    def attempts(self) -> int:
        """Number of reconnect attempts started so far."""

        return self._attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def exhausted(self) -> bool:
        """Return ``True`` once no further attempt will be scheduled."""

        return self._attempts >= self._max_attempts

    def schedule(self) -> bool:
        """Arm the next reconnect attempt after the configured delay.

        Returns ``False`` when the budget is spent or the scheduler refused
        the task.
        """

        if self.exhausted:
            self._log_exhausted()
            return False
        LOGGER.debug("Scheduling reconnect in %.3fs (attempts so far: %d)", self._delay, self._attempts)
        return self._scheduler.schedule(self._delay, self._attempt)

    def _attempt(self) -> None:
        self._attempts += 1
        if self._attempts > self._max_attempts:
            self._log_exhausted()
            return
        LOGGER.info("Starting reconnect attempt %d/%d", self._attempts, self._max_attempts)
        try:
            self._connect()
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Reconnect attempt %d raised; scheduling the next one", self._attempts, exc_info=exc)
            self.schedule()

    def _log_exhausted(self) -> None:
        if self._exhaustion_logged:
            return
        self._exhaustion_logged = True
        LOGGER.warning("Reconnect attempted %d times; giving up", self._max_attempts)


__all__ = ["MAX_RECONNECT_ATTEMPTS", "RECONNECT_DELAY_SECONDS", "ReconnectController"]
