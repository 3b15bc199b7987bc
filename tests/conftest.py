from __future__ import annotations

from collections.abc import Iterator

import pytest

from tests._support import UdpCollector


@pytest.fixture
def udp_collector() -> Iterator[UdpCollector]:
    collector = UdpCollector()
    collector.start()
    try:
        yield collector
    finally:
        collector.close()
