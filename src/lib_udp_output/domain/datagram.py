"""Datagram value object handed from the formatter to the sender worker."""

from __future__ import annotations

from dataclasses import dataclass

ENCODING = "utf-8"
LINE_TERMINATOR = "\r\n"


@dataclass(slots=True, frozen=True)
class Datagram:
    """Immutable UDP payload plus its destination address."""

    payload: bytes
    address: tuple[str, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", bytes(self.payload))

    def __len__(self) -> int:
        return len(self.payload)

    @property
    def text(self) -> str:
        """Return the payload decoded with the wire encoding."""

        return self.payload.decode(ENCODING)


__all__ = ["Datagram", "ENCODING", "LINE_TERMINATOR"]
