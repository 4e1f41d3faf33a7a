"""Click command-line interface.

Purpose
-------
Give operators a quick way to check that a Graylog input is reachable: send a
single GELF message from the shell with the same settings resolution the
library uses (flags, ``GELF_*`` environment variables, optional ``.env``).

Contents
--------
* :func:`cli` - root group with ``--traceback`` and ``--use-dotenv`` toggles.
* ``info`` / ``send`` subcommands.
* :func:`main` - entry point routed through :mod:`lib_cli_exit_tools`.
"""

from __future__ import annotations

import os
import time
from typing import Sequence

import click
import lib_cli_exit_tools

from . import __init__conf__
from . import config as gelf_config
from .adapters.diagnostics import RichDiagnostics
from .application.use_cases.make_message import make_message
from .domain.errors import GelfError
from .domain.events import LogEvent
from .runtime import create_sender, summary_info

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
SEVERITY_CHOICES = ("DEBUG", "INFO", "WARN", "WARNING", "ERROR", "SEVERE", "FATAL")


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--traceback/--no-traceback",
    "traceback",
    default=None,
    help="Show full Python tracebacks on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load a nearby .env before resolving settings (also via {gelf_config.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool | None, use_dotenv: bool) -> None:
    """GELF sender toolbox."""

    if traceback is not None:
        lib_cli_exit_tools.config.traceback = traceback
        lib_cli_exit_tools.config.traceback_force_color = traceback

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not click.core.ParameterSource.DEFAULT:
        explicit = use_dotenv
    if gelf_config.should_use_dotenv(explicit=explicit, env_value=os.getenv(gelf_config.DOTENV_ENV_VAR)):
        gelf_config.enable_dotenv()

    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("message")
@click.option("--protocol", type=click.Choice(["udp", "tcp"], case_sensitive=False), default=None)
@click.option("--host", default=None, help="Hostname or comma-separated list of GELF collectors.")
@click.option("--port", type=int, default=None)
@click.option("--facility", default=None)
@click.option("--origin-host", default=None, help="Value of the GELF host field.")
@click.option(
    "--level",
    "severity",
    type=click.Choice(SEVERITY_CHOICES, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.option("--field", "fields", multiple=True, metavar="NAME=VALUE", help="Additional field; repeatable.")
@click.option("--full-message", default=None, help="Long text; defaults to MESSAGE.")
def cli_send(
    message: str,
    protocol: str | None,
    host: str | None,
    port: int | None,
    facility: str | None,
    origin_host: str | None,
    severity: str,
    fields: tuple[str, ...],
    full_message: str | None,
) -> None:
    """Send MESSAGE as one GELF message."""

    try:
        settings = gelf_config.build_settings(
            protocol=protocol,
            host=host,
            port=port,
            facility=facility,
            origin_host=origin_host,
            fields=gelf_config.parse_fields(" ".join(fields)),
            add_extended_information=False,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    event = LogEvent(timestamp_ms=time.time_ns() // 1_000_000, severity=severity.upper(), message=message)
    gelf_message = make_message(event, settings)
    if gelf_message is None:
        raise click.ClickException("nothing to send")
    if full_message is not None:
        gelf_message.full_message = full_message

    try:
        with create_sender(settings, diagnostics=RichDiagnostics()) as sender:
            sent = sender.send_message(gelf_message)
    except GelfError as exc:
        raise click.ClickException(str(exc)) from exc
    if not sent:
        raise click.ClickException(f"message not delivered to {settings.endpoint}")
    click.echo(f"sent to {settings.endpoint}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the exit code, restoring traceback preferences."""

    previous = (lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color = previous


__all__ = ["cli", "main"]
