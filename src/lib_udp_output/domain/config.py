"""Immutable output configuration and its validation rules.

Purpose
-------
Capture the four options a host runtime hands to the UDP output (``host``,
``port``, ``params``, ``separator``) in a frozen value object that validates
itself on construction.

Contents
--------
* :class:`OutputConfig` - validated configuration with the parsed field list.
* :class:`ConfigInvalidError` - raised when required options are missing or malformed.
* :func:`parse_field_names` - splits the ``params`` option into ordered field names.

System Role
-----------
Domain layer. The formatter, the facade, and the CLI all consume
:class:`OutputConfig`; nothing downstream re-parses ``params``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

CK_HOST = "host"
CK_PORT = "port"
CK_PARAMS = "params"
CK_SEPARATOR = "separator"

DEFAULT_PORT = 12999
PARAMS_DELIMITER = ","
_PORT_RANGE = range(1, 65536)


class ConfigInvalidError(ValueError):
    """Raised when the output configuration is incomplete or malformed."""


def parse_field_names(params: str) -> tuple[str, ...]:
    """Return the ordered, de-duplicated field names encoded in ``params``.

    Trailing empty names are dropped and repeated names keep their first
    position, matching ordered-mapping projection semantics.

    Examples
    --------
    >>> parse_field_names("a,b,c")
    ('a', 'b', 'c')
    >>> parse_field_names("a,,b,a,")
    ('a', '', 'b')
    >>> parse_field_names(",,,")
    ()
    """

    names = params.split(PARAMS_DELIMITER)
    while names and names[-1] == "":
        names.pop()
    return tuple(dict.fromkeys(names))


@dataclass(slots=True, frozen=True)
class OutputConfig:
    """Validated UDP output configuration.

    Attributes
    ----------
    host:
        Destination hostname or literal IP address.
    port:
        Destination UDP port in ``[1, 65535]``.
    params:
        Comma-separated field names; their order fixes the output columns.
    separator:
        Delimiter inserted between field values; may be empty.
    field_names:
        ``params`` parsed once at construction.
    """

    host: str
    port: int
    params: str
    separator: str = ""
    field_names: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.host, str) or not self.host.strip():
            raise ConfigInvalidError("host must be a non-empty string")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigInvalidError(f"port must be an integer, got {self.port!r}")
        if self.port not in _PORT_RANGE:
            raise ConfigInvalidError(f"port must be between 1 and 65535, got {self.port}")
        if not isinstance(self.params, str) or not self.params:
            raise ConfigInvalidError("params must be a non-empty comma-separated string")
        if self.separator is None:
            object.__setattr__(self, "separator", "")
        elif not isinstance(self.separator, str):
            raise ConfigInvalidError(f"separator must be a string, got {self.separator!r}")
        object.__setattr__(self, "field_names", parse_field_names(self.params))

    @property
    def address(self) -> tuple[str, int]:
        """Return the ``(host, port)`` destination tuple."""

        return (self.host, self.port)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "OutputConfig":
        """Build a configuration from a host-supplied key/value mapping.

        ``host``, ``port`` and ``params`` must be present and non-blank;
        ``separator`` is optional.

        Raises
        ------
        ConfigInvalidError
            When a required option is missing or a value cannot be coerced.
        """

        missing = [key for key in (CK_HOST, CK_PORT, CK_PARAMS) if _is_unset(values.get(key))]
        if missing:
            raise ConfigInvalidError(f"Missing configuration: {', '.join(missing)}")
        return cls(
            host=str(values[CK_HOST]),
            port=_coerce_port(values[CK_PORT]),
            params=str(values[CK_PARAMS]),
            separator=values.get(CK_SEPARATOR) or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain mapping using the option keys."""

        return {
            CK_HOST: self.host,
            CK_PORT: self.port,
            CK_PARAMS: self.params,
            CK_SEPARATOR: self.separator,
        }


def _is_unset(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _coerce_port(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigInvalidError(f"port must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ConfigInvalidError(f"port must be an integer, got {value!r}") from exc


__all__ = [
    "CK_HOST",
    "CK_PARAMS",
    "CK_PORT",
    "CK_SEPARATOR",
    "ConfigInvalidError",
    "DEFAULT_PORT",
    "OutputConfig",
    "parse_field_names",
]
