from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any

import pytest

from lib_udp_output import ConfigInvalidError, OutputConfig, QueueClosedError, UdpOutput
from lib_udp_output.adapters.transport import open_udp_channel
from tests._support import UdpCollector, wait_until
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def _config(port: int, params: str = "a,b,c", separator: str = "|") -> dict[str, Any]:
    return {"host": "127.0.0.1", "port": port, "params": params, "separator": separator}


class _Record:
    def __init__(self, **fields: Any) -> None:
        self.fields = fields


class _FailingOpener:
    """Channel opener whose endpoint creation always fails."""

    def __init__(self) -> None:
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, loop_group, address, *, on_active, on_inactive, connect_timeout) -> Future[Any]:
        with self._lock:
            self.calls += 1
        future: Future[Any] = Future()
        future.set_exception(OSError("bind failed"))
        return future


@pytest.fixture
def output(udp_collector: UdpCollector):
    instance = UdpOutput(_config(udp_collector.port))
    yield instance
    instance.stop()


def test_records_reach_the_collector_in_order(output: UdpOutput, udp_collector: UdpCollector) -> None:
    output.write({"a": "1", "b": "2", "c": "3"})
    output.write(_Record(a="x", c="z"))

    assert udp_collector.wait_for(2) == [b"1|2|3\r\n", b"x||z\r\n"]
    assert output.initialized is True


def test_empty_records_do_not_open_the_channel(output: UdpOutput) -> None:
    output.write(None)
    output.write({})
    output.write(_Record())

    assert output.initialized is False
    assert output.pending == 0


def test_batch_skips_records_that_cannot_be_written(
    output: UdpOutput, udp_collector: UdpCollector, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.ERROR, logger="lib_udp_output")

    output.write_batch([{"a": "1"}, object(), {"b": "2"}])

    assert udp_collector.wait_for(2) == [b"1||\r\n", b"|2|\r\n"]
    assert "Dropping record" in caplog.text


def test_message_with_null_fields_is_dropped(output: UdpOutput) -> None:
    message = _Record()
    message.fields = None

    output.write(message)
    output.write_batch([message])

    assert output.initialized is False
    assert output.pending == 0


def test_batch_of_none_is_ignored(output: UdpOutput) -> None:
    output.write_batch(None)

    assert output.initialized is False


def test_wait_until_idle_reports_drained_queue(output: UdpOutput, udp_collector: UdpCollector) -> None:
    output.write_batch({"a": str(index)} for index in range(20))

    assert output.wait_until_idle(timeout=3) is True
    assert len(udp_collector.wait_for(20)) == 20


def test_missing_options_are_rejected() -> None:
    with pytest.raises(ConfigInvalidError, match="Missing configuration"):
        UdpOutput({"host": "127.0.0.1", "params": "a"})


def test_accepts_prebuilt_config(udp_collector: UdpCollector) -> None:
    config = OutputConfig(host="127.0.0.1", port=udp_collector.port, params="a")

    with UdpOutput(config) as instance:
        assert instance.config is config
        instance.write({"a": "only"})
        assert udp_collector.wait_for(1) == [b"only\r\n"]

    assert instance.is_running() is False


def test_stop_is_idempotent(output: UdpOutput) -> None:
    output.stop()
    output.stop()

    assert output.is_running() is False


def test_write_after_stop_is_rejected(output: UdpOutput, udp_collector: UdpCollector) -> None:
    output.write({"a": "before"})
    assert udp_collector.wait_for(1) == [b"before||\r\n"]

    output.stop()

    with pytest.raises(QueueClosedError):
        output.write({"a": "after"})
    assert not wait_until(lambda: len(udp_collector.received()) > 1, timeout=0.3)


def test_stop_discards_queued_datagrams() -> None:
    opener = _FailingOpener()
    instance = UdpOutput(_config(9), reconnect_delay=10.0, channel_opener=opener)
    instance.write_batch({"a": str(index)} for index in range(5))

    assert instance.pending == 5
    instance.stop()
    assert instance.pending == 0


def test_reconnect_gives_up_after_five_attempts(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_udp_output")
    opener = _FailingOpener()
    instance = UdpOutput(_config(9), reconnect_delay=0.01, channel_opener=opener)
    try:
        instance.write({"a": "1"})

        assert wait_until(lambda: opener.calls == 6)
        assert not wait_until(lambda: opener.calls > 6, timeout=0.2)
        assert instance.reconnect_attempts == 5
        assert "giving up" in caplog.text
        assert instance.is_running() is True
    finally:
        instance.stop()


def test_producer_blocked_on_full_queue_is_released_by_stop() -> None:
    instance = UdpOutput(_config(9), queue_maxsize=1, reconnect_delay=10.0, channel_opener=_FailingOpener())
    instance.write({"a": "fills the queue"})
    outcome: list[BaseException] = []

    def produce() -> None:
        try:
            instance.write({"a": "blocked"})
        except QueueClosedError as exc:
            outcome.append(exc)

    producer = threading.Thread(target=produce)
    producer.start()
    assert not wait_until(lambda: not producer.is_alive(), timeout=0.2)

    instance.stop()
    producer.join(timeout=2)

    assert not producer.is_alive()
    assert len(outcome) == 1


class _CountingOpener:
    """Real channel opener that counts how many channels were requested."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, *args: Any, **kwargs: Any) -> Future[Any]:
        self.calls += 1
        return open_udp_channel(*args, **kwargs)


def _replace_live_channel(instance: UdpOutput) -> Any:
    old = instance._channel
    assert old is not None
    old.close()
    assert wait_until(lambda: instance._channel is not None and instance._channel is not old)
    return instance._channel


def test_inactive_channel_is_replaced_and_draining_resumes(udp_collector: UdpCollector) -> None:
    with UdpOutput(_config(udp_collector.port, params="a", separator=""), reconnect_delay=0.01) as instance:
        instance.write({"a": "1"})
        assert udp_collector.wait_for(1) == [b"1\r\n"]

        _replace_live_channel(instance)
        instance.write({"a": "2"})

        assert udp_collector.wait_for(2) == [b"1\r\n", b"2\r\n"]
        assert instance.reconnect_attempts == 1


def test_sixth_inactivation_opens_no_new_channel(udp_collector: UdpCollector) -> None:
    opener = _CountingOpener()
    with UdpOutput(_config(udp_collector.port, params="a"), reconnect_delay=0.01, channel_opener=opener) as instance:
        instance.write({"a": "first"})
        assert wait_until(lambda: instance._channel is not None)

        for attempt in range(1, 6):
            _replace_live_channel(instance)
            assert instance.reconnect_attempts == attempt

        last = instance._channel
        last.close()
        assert wait_until(lambda: instance._channel is None)
        assert not wait_until(lambda: opener.calls > 6, timeout=0.2)
        assert opener.calls == 6
        assert instance.reconnect_attempts == 5
        assert instance.is_running() is True
