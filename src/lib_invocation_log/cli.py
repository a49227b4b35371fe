"""CLI adapter for ``lib_invocation_log`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect what the library will do in a given environment without
writing Python: print the resolved settings, render ad-hoc records, and run a
sample intercepted operation end to end.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_settings` – prints the layered settings as JSON.
* :func:`cli_render` – renders ``KEY=VALUE`` pairs with the record serializer.
* :func:`cli_demo` – runs a sample operation through a real engine.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root
(:mod:`lib_invocation_log.core`) and never reaches into adapters directly.
``lib_cli_exit_tools`` centralises the exit code strategy so all commands
behave consistently across shells and CI.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.context import AMBIENT_CONTEXT
from .application.serializer import render
from .core import create_engine, load_settings
from .domain.descriptor import InvocationDescriptor
from .domain.severity import Severity
from .observability import get_record_logger, set_record_level
from .testing import i_should_fail

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

SEVERITY_CHOICES: Final[tuple[str, ...]] = tuple(member.label for member in Severity)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    default=None,
    help="Settings file (TOML, JSON or YAML) layered below environment variables",
)


def _resolve_version() -> str:
    """Return the installed package version with sensible fallbacks."""

    try:
        return metadata.version("lib_invocation_log")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Structured method-level execution logger",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_invocation_log",
    message="lib_invocation_log version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_invocation_log")
    except metadata.PackageNotFoundError:
        click.echo("lib_invocation_log (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_invocation_log')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("settings", context_settings=CLICK_CONTEXT_SETTINGS)
@_config_option
@click.option("--section", default="invocation_log", show_default=True, help="Settings file section")
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_settings(config_path: Optional[Path], section: str, indent: Optional[int]) -> None:
    """Print the effective settings (defaults, file, environment) as JSON."""

    settings = load_settings(path=config_path, section=section or None)
    click.echo(json.dumps(settings.as_dict(), indent=indent))


@cli.command("render", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("fields", nargs=-1)
def cli_render(fields: Sequence[str]) -> None:
    """Render ``KEY=VALUE`` pairs as one record line, in argument order.

    Values ``null``, ``true``/``false`` and numbers are emitted unquoted.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> CliRunner().invoke(cli, ["render", "apiId=Orders", "processTime=12"]).output.strip()
    '{ "apiId": "Orders", "processTime": 12 }'
    """

    record: dict[str, object] = {}
    for item in fields:
        key, separator, value = item.partition("=")
        if not separator or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint="FIELDS")
        record[key] = _coerce_literal(value)
    click.echo(render(record))


@cli.command("demo", context_settings=CLICK_CONTEXT_SETTINGS)
@_config_option
@click.option("--scope", default="demo.DemoService", show_default=True, help="Declaring scope of the sample operation")
@click.option("--operation", default="process", show_default=True, help="Operation name of the sample operation")
@click.option("--api-id", default=None, help="Override the configured API identifier")
@click.option(
    "--log-level",
    type=click.Choice(SEVERITY_CHOICES, case_sensitive=False),
    default=None,
    help="Override the configured minimum severity",
)
@click.option("--correlation-id", default=None, help="Correlation id bound for the sample operation")
@click.option("--transaction-id", default=None, help="Transaction id bound under the transaction key")
@click.option("--fail/--no-fail", default=False, help="Make the sample operation raise")
@click.option(
    "--record-level",
    type=click.Choice(SEVERITY_CHOICES, case_sensitive=False),
    default=None,
    help="Temporarily set the record logger level (INFO unless the host changed it)",
)
def cli_demo(
    config_path: Optional[Path],
    scope: str,
    operation: str,
    api_id: Optional[str],
    log_level: Optional[str],
    correlation_id: Optional[str],
    transaction_id: Optional[str],
    fail: bool,
    record_level: Optional[str],
) -> None:
    """Run one sample operation through the engine and emit its record.

    The record goes to standard output, or standard error with ``--fail``, in
    which case the sample error propagates and the command exits non-zero.
    """

    settings = load_settings(path=config_path)
    overrides: dict[str, object] = {}
    if api_id is not None:
        overrides["api_id"] = api_id
    if log_level is not None:
        overrides["log_level"] = log_level
    if overrides:
        settings = settings.with_overrides(**overrides)

    engine = create_engine(settings)
    descriptor = InvocationDescriptor(operation_name=operation, declaring_scope_name=scope)

    def work() -> str:
        if fail:
            i_should_fail()
        return "ok"

    bound: list[str] = []
    previous_level = get_record_logger().level
    try:
        if record_level is not None:
            set_record_level(record_level)
        if correlation_id is not None:
            AMBIENT_CONTEXT.set(settings.correlation_id_key, correlation_id)
            bound.append(settings.correlation_id_key)
        if transaction_id is not None:
            AMBIENT_CONTEXT.set(settings.resolved_transaction_id_key, transaction_id)
            bound.append(settings.resolved_transaction_id_key)
        engine.intercept(descriptor, work)
    finally:
        for key in bound:
            AMBIENT_CONTEXT.clear(key)
        get_record_logger().setLevel(previous_level)


@cli.command("fail", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_fail() -> None:
    """Trigger a deterministic error for testing traceback handling."""

    i_should_fail()


def _coerce_literal(value: str) -> object:
    """Interpret ``null``/booleans/numbers; keep anything else as text.

    Examples
    --------
    >>> _coerce_literal('null'), _coerce_literal('true'), _coerce_literal('-3'), _coerce_literal('1.5'), _coerce_literal('x')
    (None, True, -3, 1.5, 'x')
    """

    lowered = value.lower()
    if lowered == "null":
        return None
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)
        return float(value)
    except ValueError:
        return value


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_invocation_log",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
