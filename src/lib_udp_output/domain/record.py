"""Helpers normalising incoming log records into field mappings.

Hosts hand over either a plain mapping or a message object exposing its
fields through a ``fields`` attribute. Both shapes reduce to a
``Mapping[str, Any]`` before projection.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

Record = Mapping[str, Any]


def record_fields(record: Any) -> Record | None:
    """Return the field mapping carried by ``record`` or ``None``.

    Examples
    --------
    >>> record_fields({"a": 1})
    {'a': 1}
    >>> class Message:
    ...     fields = {"b": 2}
    >>> record_fields(Message())
    {'b': 2}
    >>> record_fields(None) is None
    True
    >>> Message.fields = None
    >>> record_fields(Message()) is None
    True
    """

    if record is None:
        return None
    if isinstance(record, Mapping):
        return record
    if not hasattr(record, "fields"):
        raise TypeError(f"record must be a mapping or expose a 'fields' mapping, got {type(record).__name__}")
    fields = record.fields
    if fields is None or isinstance(fields, Mapping):
        return fields
    raise TypeError(f"'fields' of {type(record).__name__} must be a mapping, got {type(fields).__name__}")


__all__ = ["Record", "record_fields"]
