"""Config commands -- view and modify the stored configuration.

Provides the ``spacectl config`` sub-command group. The config file holds
the API base URL, the token pair and the defaults used by
``spacectl tenant create``; only the URL and the defaults can be set from
here, tokens are managed by ``auth login`` / ``auth logout``.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from spacectl.config import Config
from spacectl.context import exits_on_error, get_context
from spacectl.exceptions import ConfigurationError
from spacectl.output import info, success


config_app = typer.Typer(no_args_is_help=True)

SETTABLE_KEYS = (
    "api_url",
    "default_cloud",
    "default_region",
    "default_compute",
    "default_memory",
)

_MASK = "********"


def _masked(config: Config) -> dict[str, Any]:
    data = config.model_dump(mode="json")
    for key in ("access_token", "refresh_token"):
        if data.get(key):
            data[key] = _MASK
    return data


@config_app.command("show")
@exits_on_error
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration with tokens masked.

    Example::

        spacectl config show
        spacectl -o json config show
    """
    cli = get_context(ctx)
    info(f"Config file: {cli.store.path}")
    cli.render(_masked(cli.store.config))


@config_app.command("set")
@exits_on_error
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(help=f"One of: {', '.join(SETTABLE_KEYS)}."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value and save the file.

    The value is validated against the field's type, so
    ``default_compute`` and ``default_memory`` must be integers.

    Example::

        spacectl config set api_url https://api.example.com
        spacectl config set default_region us
    """
    if key not in SETTABLE_KEYS:
        raise ConfigurationError(
            f"unknown or read-only config key: {key!r} (expected one of: {', '.join(SETTABLE_KEYS)})"
        )

    cli = get_context(ctx)
    data = cli.store.config.model_dump()
    data[key] = value
    try:
        updated = Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid value for {key}: {value!r}") from exc

    cli.store.save(updated)
    success(f"Set {key} = {getattr(updated, key)}")
