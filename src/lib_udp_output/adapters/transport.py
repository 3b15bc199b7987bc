"""UDP transport channel backed by an asyncio datagram endpoint.

Purpose
-------
Hold the non-blocking UDP socket (bound to an ephemeral local port and
connected to the collector) and report its liveness through two callbacks.

Contents
--------
* :func:`open_udp_channel` - create an endpoint on an :class:`EventLoopGroup`.
* :class:`UdpChannel` - thread-safe write surface used by the sender worker.
* :data:`CONNECT_TIMEOUT_SECONDS` - upper bound for endpoint creation.

System Role
-----------
``on_active`` fires once the endpoint is up and ``on_inactive`` fires once
when the transport is closed or lost. Bytes received on the socket are
discarded; the output never reads.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future
from typing import Any, Callable

from lib_udp_output.application.ports.channel import (
    ActiveCallback,
    ChannelInactiveError,
    InactiveCallback,
    TransportChannelPort,
)
from lib_udp_output.domain.datagram import Datagram

from .event_loop import EventLoopGroup

LOGGER = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 5.0


class UdpChannel(TransportChannelPort):
    """Write side of one connected UDP endpoint."""

    def __init__(self, transport: asyncio.DatagramTransport, loop_group: EventLoopGroup) -> None:
        self._transport = transport
        self._loop_group = loop_group
        self._active = True

    def is_active(self) -> bool:
        return self._active and not self._transport.is_closing()

    @property
    def local_address(self) -> Any:
        return self._transport.get_extra_info("sockname")

    @property
    def remote_address(self) -> Any:
        return self._transport.get_extra_info("peername")

    def write(self, datagram: Datagram) -> Future[None]:
        """Hand ``datagram`` to the loop and return its completion future.

        Raises
        ------
        ChannelInactiveError
            When the channel is already inactive or the loop is shutting down.
        """

        if not self.is_active():
            raise ChannelInactiveError("channel is not active")
        future: Future[None] = Future()

        def send() -> None:
            if not future.set_running_or_notify_cancel():
                return
            if not self.is_active():
                future.set_exception(ChannelInactiveError("channel closed before the datagram was sent"))
                return
            try:
                self._transport.sendto(datagram.payload)
            except Exception as exc:  # noqa: BLE001
                future.set_exception(exc)
            else:
                future.set_result(None)

        if not self._loop_group.call_soon(send):
            raise ChannelInactiveError("event loop is shutting down")
        return future

    def close(self) -> None:
        """Close the endpoint; ``on_inactive`` fires from the loop."""

        if self._loop_group.in_loop_thread():
            self._transport.close()
            return
        if not self._loop_group.call_soon(self._transport.close):
            LOGGER.debug("Event loop already shutting down; channel close skipped")

    def _mark_inactive(self) -> None:
        self._active = False


class _ChannelProtocol(asyncio.DatagramProtocol):
    """Bridge asyncio endpoint events to the channel callbacks."""

    def __init__(
        self,
        loop_group: EventLoopGroup,
        *,
        on_active: ActiveCallback,
        on_inactive: InactiveCallback,
    ) -> None:
        self._loop_group = loop_group
        self._on_active = on_active
        self._on_inactive = on_inactive
        self._abandoned = False
        self.channel: UdpChannel | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.channel = UdpChannel(transport, self._loop_group)  # type: ignore[arg-type]
        _notify(self._on_active, self.channel)

    def datagram_received(self, data: bytes, addr: Any) -> None:
        # we only send data, never read on the socket
        return None

    def error_received(self, exc: Exception) -> None:
        LOGGER.error("UDP socket error: %s", exc)

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            LOGGER.info("Channel disconnected: %s", exc)
        else:
            LOGGER.info("Channel disconnected.")
        channel = self.channel
        if channel is None:
            return
        channel._mark_inactive()
        if not self._abandoned:
            _notify(self._on_inactive, channel)

    def abandon(self) -> None:
        """Close a channel whose open failed without reporting it inactive.

        The failure reaches listeners once, through the open future.
        """

        self._abandoned = True
        if self.channel is not None:
            self.channel._mark_inactive()
            self.channel.close()


def _notify(callback: Callable[[TransportChannelPort], None], channel: TransportChannelPort) -> None:
    try:
        callback(channel)
    except Exception as exc:  # noqa: BLE001
        LOGGER.error("Channel callback %r raised; continuing", callback, exc_info=exc)


def open_udp_channel(
    loop_group: EventLoopGroup,
    address: tuple[str, int],
    *,
    on_active: ActiveCallback,
    on_inactive: InactiveCallback,
    connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
) -> Future[UdpChannel]:
    """Create a UDP endpoint connected to ``address`` on ``loop_group``.

    The returned future resolves to the :class:`UdpChannel` or carries the
    bind/resolve/timeout error.
    """

    async def _open() -> UdpChannel:
        loop = asyncio.get_running_loop()
        protocol = _ChannelProtocol(loop_group, on_active=on_active, on_inactive=on_inactive)
        try:
            await asyncio.wait_for(
                loop.create_datagram_endpoint(lambda: protocol, remote_addr=address),
                timeout=connect_timeout,
            )
        except BaseException:
            protocol.abandon()
            raise
        if protocol.channel is None:
            raise ChannelInactiveError(f"endpoint for {address[0]}:{address[1]} did not become active")
        return protocol.channel

    return loop_group.submit(_open())


ChannelOpener = Callable[..., "Future[Any]"]


__all__ = ["CONNECT_TIMEOUT_SECONDS", "ChannelOpener", "UdpChannel", "open_udp_channel"]
