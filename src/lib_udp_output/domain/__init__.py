"""Domain value objects and the pure formatter used by the UDP output."""

from __future__ import annotations

from .config import DEFAULT_PORT, ConfigInvalidError, OutputConfig, parse_field_names
from .datagram import Datagram
from .formatter import FieldFormatter
from .record import Record, record_fields

__all__ = [
    "ConfigInvalidError",
    "DEFAULT_PORT",
    "Datagram",
    "FieldFormatter",
    "OutputConfig",
    "Record",
    "parse_field_names",
    "record_fields",
]
