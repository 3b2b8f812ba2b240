"""Per-invocation CLI state shared by every command.

The root callback in :mod:`spacectl.app` parses the global options once
into a :class:`CliSettings` and stores a :class:`CliContext` in
``typer.Context.obj``. Commands fetch it with :func:`get_context`; there are
no module-level flag globals.

:func:`exits_on_error` turns :class:`~spacectl.exceptions.SpacectlError`
raised inside a command into a printed error and a process exit code.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import typer

from spacectl.client.transport import Transport
from spacectl.config import CredentialStore
from spacectl.exceptions import AuthError, SpacectlError
from spacectl.formatter import Formatter
from spacectl.output import error, suggest

F = TypeVar("F", bound=Callable[..., Any])

CLI_NAME = "spacectl"


@dataclass
class CliSettings:
    """Global options, fixed for the lifetime of one invocation.

    Attributes:
        config_path: Config file location; ``None`` means the default path.
        api_url: API base URL override. Applied to the loaded config, so it
            is persisted by the next save (login, refresh, logout).
        output: Output format name for :class:`~spacectl.formatter.Formatter`.
        no_headers: Omit header rows in table and CSV output.
        quiet: Suppress informational stderr messages.
        debug: Echo API requests and responses to stderr.
    """

    config_path: Optional[Path] = None
    api_url: Optional[str] = None
    output: str = "table"
    no_headers: bool = False
    quiet: bool = False
    debug: bool = False


class CliContext:
    """Lazily built collaborators for one CLI invocation.

    Args:
        settings: Parsed global options.
    """

    def __init__(self, settings: CliSettings) -> None:
        self.settings = settings
        self._store: Optional[CredentialStore] = None
        self._formatter: Optional[Formatter] = None

    @property
    def store(self) -> CredentialStore:
        """The credential store, loaded on first use with ``--api-url`` applied."""
        if self._store is None:
            store = CredentialStore(self.settings.config_path)
            if self.settings.api_url:
                store.config.api_url = self.settings.api_url
            self._store = store
        return self._store

    @property
    def formatter(self) -> Formatter:
        """The formatter for ``--output``; raises ConfigurationError for unknown formats."""
        if self._formatter is None:
            self._formatter = Formatter(self.settings.output, self.settings.no_headers)
        return self._formatter

    def render(self, data: Any) -> None:
        """Render *data* to stdout in the selected output format."""
        self.formatter.render(data)

    def require_auth(self) -> None:
        """Raise :class:`AuthError` unless a token pair is stored."""
        if not self.store.is_authenticated():
            raise AuthError(f"not authenticated. Please run '{CLI_NAME} auth login' first")

    def transport(self) -> Transport:
        """Return a new, unopened :class:`Transport` for this invocation."""
        return Transport(self.store, debug=self.settings.debug, cli_name=CLI_NAME)


def get_context(ctx: typer.Context) -> CliContext:
    """Return the :class:`CliContext` installed by the root callback."""
    obj = ctx.find_root().obj
    if not isinstance(obj, CliContext):
        obj = CliContext(CliSettings())
        ctx.find_root().obj = obj
    return obj


def confirm_or_abort(message: str, force: bool) -> None:
    """Ask for confirmation unless *force*; a "no" aborts the command."""
    if not force:
        typer.confirm(message, abort=True)


def report_error(exc: SpacectlError) -> None:
    """Print *exc* to stderr, with a login hint for authentication failures."""
    error(str(exc))
    if isinstance(exc, AuthError):
        suggest(f"Log in again: {CLI_NAME} auth login")


def exits_on_error(func: F) -> F:
    """Decorate a Typer command so spacectl errors exit with their exit code."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SpacectlError as exc:
            report_error(exc)
            raise typer.Exit(code=exc.exit_code) from None

    return wrapper  # type: ignore[return-value]
