"""Field-projecting UDP log output.

Host runtimes construct :class:`UdpOutput` with the ``host``, ``port``,
``params`` and ``separator`` options, then call ``write``/``write_batch`` for
incoming records and ``stop`` on shutdown.
"""

from __future__ import annotations

from .adapters import QueueClosedError
from .application.ports import ChannelInactiveError
from .config import load_output_config
from .domain import ConfigInvalidError, Datagram, FieldFormatter, OutputConfig
from .runtime import UdpOutput

__all__ = [
    "ChannelInactiveError",
    "ConfigInvalidError",
    "Datagram",
    "FieldFormatter",
    "OutputConfig",
    "QueueClosedError",
    "UdpOutput",
    "load_output_config",
]
