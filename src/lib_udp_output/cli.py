"""Command-line adapter for the UDP output.

Purpose
-------
Offer a small operator surface: print package metadata and forward JSON
records from a file or stdin to a collector, using the same
:class:`~lib_udp_output.runtime.UdpOutput` a host runtime would embed.

Contents
--------
* :func:`cli` - click group carrying the global flags.
* :func:`cli_info` / :func:`cli_send` - subcommands.
* :func:`main` - entry point wrapping :func:`lib_cli_exit_tools.run_cli`.
"""

from __future__ import annotations

import json
import logging
import os
from typing import IO, Sequence

import click
import lib_cli_exit_tools
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler

from . import __init__conf__
from . import config as config_module
from .domain.config import CK_HOST, CK_PARAMS, CK_PORT, CK_SEPARATOR, DEFAULT_PORT, ConfigInvalidError, OutputConfig
from .runtime import UdpOutput

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_PACKAGE_LOGGER = "lib_udp_output"


def _configure_logging(level: str) -> None:
    """Route package log records through a Rich handler on stderr."""

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


@click.group(
    help="Forward field projections of JSON records to a UDP collector.",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(version=__init__conf__.version, prog_name=__init__conf__.shell_command, message="%(prog)s version %(version)s")
@click.option("--traceback/--no-traceback", default=False, help="Show full Python tracebacks on errors.")
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load environment variables from the nearest .env (also enabled by {config_module.DOTENV_ENV_VAR}=1).",
)
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default="WARNING", show_default=True)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool, log_level: str) -> None:
    """Apply global flags, then run the chosen subcommand or print the banner."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not ParameterSource.DEFAULT:
        explicit = use_dotenv
    if config_module.should_use_dotenv(explicit=explicit, env_value=os.getenv(config_module.DOTENV_ENV_VAR)):
        config_module.enable_dotenv()

    _configure_logging(log_level.upper())

    if ctx.invoked_subcommand is None:
        click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(__init__conf__.summary_info(), nl=False)


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--host", envvar=config_module.ENV_KEYS[CK_HOST], required=True, help="Collector hostname or IP.")
@click.option("--port", envvar=config_module.ENV_KEYS[CK_PORT], type=int, default=DEFAULT_PORT, show_default=True)
@click.option("--params", envvar=config_module.ENV_KEYS[CK_PARAMS], required=True, help="Comma-separated field names, in output order.")
@click.option("--separator", envvar=config_module.ENV_KEYS[CK_SEPARATOR], default="", help="Delimiter placed between field values.")
@click.option(
    "--input",
    "source",
    type=click.File("r", encoding="utf-8"),
    default="-",
    show_default=True,
    help="File with one JSON object per line ('-' reads stdin).",
)
@click.option("--drain-timeout", type=float, default=5.0, show_default=True, help="Seconds to wait for queued datagrams before stopping.")
def cli_send(host: str, port: int, params: str, separator: str, source: IO[str], drain_timeout: float) -> None:
    """Send each JSON record read from ``--input`` as one UDP datagram."""

    try:
        output_config = OutputConfig(host=host, port=port, params=params, separator=separator)
    except ConfigInvalidError as exc:
        raise click.BadParameter(str(exc)) from exc

    records = list(_read_records(source))
    with UdpOutput(output_config) as output:
        output.write_batch(records)
        drained = output.wait_until_idle(drain_timeout)
    if not drained:
        click.echo(f"warning: not all records were handed to {host}:{port} within {drain_timeout}s", err=True)
    click.echo(f"sent {len(records)} record(s) to {host}:{port}")


def _read_records(source: IO[str]) -> list[dict[str, object]]:
    records: list[dict[str, object]] = []
    for number, line in enumerate(source, start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            raise click.ClickException(f"line {number}: invalid JSON ({exc.msg})") from exc
        if not isinstance(record, dict):
            raise click.ClickException(f"line {number}: expected a JSON object")
        records.append(record)
    return records


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI through :mod:`lib_cli_exit_tools` and return the exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    so embedding callers keep their own settings.
    """

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]
