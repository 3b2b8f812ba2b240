"""Account commands -- login, logout, registration and identity.

Provides the ``spacectl auth`` sub-command group plus the top-level
``register``, ``verify``, ``whoami`` and ``version`` commands.

Typical workflow::

    spacectl register --email dev@example.com
    spacectl verify --email dev@example.com --code 123456
    spacectl auth login --email dev@example.com
    spacectl whoami
"""

from __future__ import annotations

from typing import Optional

import typer

from spacectl import __version__
from spacectl.api import AuthAPI
from spacectl.auth.callback import DEFAULT_CALLBACK_PORT, github_login
from spacectl.context import CLI_NAME, CliContext, exits_on_error, get_context
from spacectl.exceptions import SpacectlError
from spacectl.output import print_data, success, suggest


auth_app = typer.Typer(no_args_is_help=True)


def _github_login(cli: CliContext, callback_port: int) -> None:
    try:
        with cli.transport() as transport:
            tokens = github_login(AuthAPI(transport), cli.store, port=callback_port)
    except SpacectlError as exc:
        raise exc.with_context("GitHub login failed") from exc
    success(f"Successfully logged in as {tokens.user_email} via GitHub")


@auth_app.command("login")
@exits_on_error
def auth_login(
    ctx: typer.Context,
    email: Optional[str] = typer.Option(None, "--email", help="Email address."),
    password: Optional[str] = typer.Option(None, "--password", help="Password (prompted if omitted)."),
    github: bool = typer.Option(False, "--github", help="Log in with GitHub in the browser."),
    callback_port: int = typer.Option(
        DEFAULT_CALLBACK_PORT, "--callback-port", help="Local port for the GitHub callback."
    ),
) -> None:
    """Log in with email and password, or with GitHub.

    Missing credentials are prompted for; the password is read without
    echo. The issued token pair is saved to the config file.

    Example::

        spacectl auth login --email dev@example.com
        spacectl auth login --github --callback-port 9000
    """
    cli = get_context(ctx)
    if github:
        _github_login(cli, callback_port)
        return

    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    try:
        with cli.transport() as transport:
            response = AuthAPI(transport).login(email, password)
    except SpacectlError as exc:
        raise exc.with_context("login failed") from exc

    cli.store.update_tokens(response.access_token, response.refresh_token, response.user.email)
    cli.store.save()
    success(f"Successfully logged in as {response.user.email}")


@auth_app.command("github-login", deprecated=True)
@exits_on_error
def auth_github_login(
    ctx: typer.Context,
    callback_port: int = typer.Option(
        DEFAULT_CALLBACK_PORT, "--callback-port", help="Local port for the GitHub callback."
    ),
) -> None:
    """Log in with GitHub in the browser. Same as ``auth login --github``."""
    _github_login(get_context(ctx), callback_port)


@auth_app.command("logout")
@exits_on_error
def auth_logout(ctx: typer.Context) -> None:
    """Forget the stored tokens."""
    cli = get_context(ctx)
    cli.store.clear_auth()
    cli.store.save()
    success("Successfully logged out")


@exits_on_error
def register_command(
    ctx: typer.Context,
    email: Optional[str] = typer.Option(None, "--email", help="Email address."),
    password: Optional[str] = typer.Option(None, "--password", help="Password (prompted if omitted)."),
) -> None:
    """Register a new account.

    A verification code is emailed to the address; confirm it with
    ``spacectl verify``.
    """
    cli = get_context(ctx)
    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True, confirmation_prompt=True)

    try:
        with cli.transport() as transport:
            AuthAPI(transport).register(email, password)
    except SpacectlError as exc:
        raise exc.with_context("registration failed") from exc

    success(f"Successfully registered {email}. Please check your email for verification instructions.")
    suggest(f"Verify it: {CLI_NAME} verify --email {email} --code <code>")


@exits_on_error
def verify_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Email address to verify."),
    code: Optional[str] = typer.Option(None, "--code", help="Code from the verification email."),
    resend: bool = typer.Option(False, "--resend", help="Send a new verification code instead."),
) -> None:
    """Verify an account email, or request a new verification code."""
    cli = get_context(ctx)
    with cli.transport() as transport:
        api = AuthAPI(transport)
        if resend:
            api.resend_verification(email)
            success(f"Verification code sent to {email}")
            return
        if not code:
            code = typer.prompt("Verification code")
        api.verify_email(email, code)
    success(f"Email {email} verified")
    suggest(f"Log in: {CLI_NAME} auth login --email {email}")


@exits_on_error
def whoami_command(ctx: typer.Context) -> None:
    """Show the logged-in user."""
    cli = get_context(ctx)
    cli.require_auth()
    try:
        with cli.transport() as transport:
            user = AuthAPI(transport).get_user_info()
    except SpacectlError as exc:
        raise exc.with_context("failed to get user info") from exc
    cli.render(user)


def version_command() -> None:
    """Print the spacectl version."""
    print_data(f"{CLI_NAME} {__version__}")
