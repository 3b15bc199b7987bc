"""Record-to-datagram formatter.

Purpose
-------
Project a record onto the configured field list and render the projection as
one delimited, ``\\r\\n``-terminated line encoded as UTF-8.

Contents
--------
* :class:`FieldFormatter` - pure projection/rendering/encoding pipeline.

System Role
-----------
Runs on the producer thread inside :meth:`lib_udp_output.runtime.UdpOutput.write`
before the datagram is handed to the bounded queue. No I/O happens here.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import OutputConfig
from .datagram import ENCODING, LINE_TERMINATOR, Datagram
from .record import Record

LOGGER = logging.getLogger(__name__)


def _render_value(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class FieldFormatter:
    """Turn records into datagrams addressed to the configured collector.

    Values are emitted verbatim; control characters inside a value are not
    escaped.

    Examples
    --------
    >>> config = OutputConfig(host="10.0.0.1", port=514, params="a,b,c", separator="|")
    >>> FieldFormatter(config).format({"a": "1", "c": "3", "d": "4"}).payload
    b'1||3\\r\\n'
    """

    def __init__(self, config: OutputConfig) -> None:
        self._field_names = config.field_names
        self._separator = config.separator
        self._address = config.address

    @property
    def field_names(self) -> tuple[str, ...]:
        return self._field_names

    def project(self, fields: Record) -> dict[str, str]:
        """Return the ordered projection of ``fields`` onto the field list."""

        projection = dict.fromkeys(self._field_names, "")
        for name in self._field_names:
            if name in fields:
                projection[name] = _render_value(fields[name])
        return projection

    def render(self, fields: Record) -> str:
        """Return the delimited line for ``fields`` including the terminator."""

        line = self._separator.join(self.project(fields).values())
        return line + LINE_TERMINATOR

    def format(self, fields: Record) -> Datagram:
        """Encode the rendered line into a :class:`Datagram`."""

        line = self.render(fields)
        LOGGER.debug("Rendered datagram line %r", line)
        return Datagram(payload=line.encode(ENCODING), address=self._address)


__all__ = ["FieldFormatter"]
