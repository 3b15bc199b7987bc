"""Static package metadata surfaced by the CLI ``info`` command.

The values mirror ``pyproject.toml`` so the banner printed by
:func:`print_info` stays aligned with the installed distribution.
"""

from __future__ import annotations

from typing import Callable

name = "lib_udp_output"
title = "Field-projecting UDP log output"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_udp_output"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib-udp-output"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Emit the metadata banner line by line through ``writer``.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_udp_output:\\n'
    """

    emit = writer if writer is not None else (lambda text: print(text, end=""))
    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in fields:
        emit(f"    {label:<{pad}} = {value}\n")


def summary_info() -> str:
    """Return the banner produced by :func:`print_info` as one string."""

    lines: list[str] = []
    print_info(writer=lines.append)
    return "".join(lines)
