from __future__ import annotations

from lib_udp_output.application.use_cases.shutdown import create_shutdown
from tests._support import FakeChannel
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def record(self, name: str) -> None:
        self.calls.append(name)


class _FakeWorker:
    def __init__(self, recorder: _Recorder) -> None:
        self.recorder = recorder

    def stop(self) -> None:
        self.recorder.record("worker.stop")


class _FakeQueue:
    def __init__(self, recorder: _Recorder, pending: int = 0) -> None:
        self.recorder = recorder
        self.pending = pending

    def offer(self, datagram, timeout=None) -> bool:
        return True

    def poll(self, timeout: float = 0.1):
        return None

    def close(self) -> int:
        self.recorder.record("queue.close")
        return self.pending


class _FakeLoopGroup:
    def __init__(self, recorder: _Recorder) -> None:
        self.recorder = recorder

    def shutdown_gracefully(self) -> None:
        self.recorder.record("loop.shutdown")


class _RecordingChannel(FakeChannel):
    def __init__(self, recorder: _Recorder) -> None:
        super().__init__()
        self.recorder = recorder

    def close(self) -> None:
        self.recorder.record("channel.close")
        super().close()


def test_shutdown_runs_steps_in_order() -> None:
    recorder = _Recorder()
    channel = _RecordingChannel(recorder)
    shutdown = create_shutdown(
        worker=_FakeWorker(recorder),
        queue=_FakeQueue(recorder, pending=3),
        loop_group=_FakeLoopGroup(recorder),
        current_channel=lambda: channel,
    )

    discarded = shutdown()

    assert discarded == 3
    assert recorder.calls == ["worker.stop", "channel.close", "queue.close", "loop.shutdown"]
    assert channel.closed is True


def test_shutdown_without_channel_or_worker_still_closes_queue() -> None:
    recorder = _Recorder()
    shutdown = create_shutdown(
        worker=None,
        queue=_FakeQueue(recorder),
        loop_group=None,
        current_channel=lambda: None,
    )

    assert shutdown() == 0
    assert recorder.calls == ["queue.close"]
