"""Typer application and CLI entry point for spacectl.

This module wires together the top-level Typer application and registers
the sub-commands (``auth``, ``config``, ``org``, ``project``, ``tenant``)
and the single commands (``register``, ``verify``, ``whoami``,
``version``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`spacectl.context`: Per-invocation settings built in :func:`main_callback`.
    :mod:`spacectl.output`: Diagnostics initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from spacectl import __version__
from spacectl.commands.auth import (
    auth_app,
    register_command,
    verify_command,
    version_command,
    whoami_command,
)
from spacectl.commands.config import config_app
from spacectl.commands.organization import org_app
from spacectl.commands.project import project_app
from spacectl.commands.tenant import tenant_app
from spacectl.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="spacectl",
    help="Manage organizations, projects and tenants on the Kubespaces platform.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.add_typer(auth_app, name="auth", help="Log in and out.")
app.add_typer(config_app, name="config", help="Configuration management.")
app.add_typer(org_app, name="org", help="Manage organizations.")
app.add_typer(project_app, name="project", help="Manage projects.")
app.add_typer(tenant_app, name="tenant", help="Manage tenants.")

app.command("register")(register_command)
app.command("verify")(verify_command)
app.command("whoami")(whoami_command)
app.command("version")(version_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"spacectl {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", envvar="SPACECTL_CONFIG", help="Config file path (default ~/.spacectl)."
    ),
    api_url: Optional[str] = typer.Option(
        None, "--api-url", envvar="SPACECTL_API_URL", help="API base URL."
    ),
    output: str = typer.Option(
        "table", "-o", "--output", help="Output format: table, json, yaml or csv."
    ),
    no_headers: bool = typer.Option(
        False, "--no-headers", help="Omit headers in table and CSV output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Echo API requests and responses to stderr."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~spacectl.output.OutputManager` from
    CLI flags and stores a :class:`~spacectl.context.CliContext` in the
    Typer context so that sub-commands can read it via
    :func:`~spacectl.context.get_context`.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        config: Config file override.
        api_url: API base URL override.
        output: Output format name, validated when first used.
        no_headers: Omit header rows in table and CSV output.
        quiet: Suppress non-essential diagnostic output.
        debug: Enable the request/response echo.
        no_color: Disable all colour and Rich markup.
    """
    from spacectl.context import CliContext, CliSettings
    from spacectl.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, debug=debug))

    settings = CliSettings(
        config_path=config,
        api_url=api_url,
        output=output,
        no_headers=no_headers,
        quiet=quiet,
        debug=debug,
    )
    ctx.obj = CliContext(settings)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from spacectl.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``spacectl`` console script.

    Unhandled :class:`~spacectl.exceptions.SpacectlError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from spacectl.context import report_error
        from spacectl.exceptions import SpacectlError
        from spacectl.output import error

        if isinstance(exc, SpacectlError):
            report_error(exc)
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
