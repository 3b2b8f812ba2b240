"""Shared test fixtures for spacectl.

Provides isolated config environments, a fake management API served
through :class:`httpx.MockTransport`, output state management and a CLI
runner. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from spacectl.client.transport import Transport
from spacectl.config import CredentialStore
from spacectl.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches its Rich console, which holds a reference to
    the sys.stderr of the moment it was created. CliRunner swaps those
    streams per invocation, so a fresh manager is forced for each test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config file and data directory into tmp_path.

    Sets ``SPACECTL_CONFIG`` and ``XDG_DATA_HOME`` so that tests never
    touch the real ``~/.spacectl``, clears ``SPACECTL_API_URL`` and
    disables colour so stderr assertions see plain text.

    Returns:
        The config file path (not created).
    """
    config_path = tmp_path / "spacectl.json"
    monkeypatch.setenv("SPACECTL_CONFIG", str(config_path))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("SPACECTL_API_URL", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    return config_path


@pytest.fixture
def store(isolated_config: Path) -> CredentialStore:
    """A credential store on the isolated config path, not yet saved."""
    return CredentialStore(isolated_config)


@pytest.fixture
def logged_in(isolated_config: Path) -> CredentialStore:
    """Write a config file holding a valid token pair and return its store."""
    isolated_config.write_text(
        json.dumps(
            {
                "api_url": "http://api.test",
                "access_token": "acc-1",
                "refresh_token": "ref-1",
                "user_email": "dev@example.com",
            }
        )
    )
    return CredentialStore(isolated_config)


# ---------------------------------------------------------------------------
# Fake API
# ---------------------------------------------------------------------------

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeAPI:
    """Route table behind an :class:`httpx.MockTransport`.

    Routes are keyed by ``(method, path)``. A route is either a fixed
    response or a callable receiving the request. Unknown routes answer
    404 with an error envelope. Every request is recorded in
    :attr:`requests`.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status: int = 200,
        text: Optional[str] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        if handler is not None:
            self.routes[(method, path)] = handler
        elif text is not None:
            self.routes[(method, path)] = httpx.Response(status, text=text)
        else:
            self.routes[(method, path)] = httpx.Response(status, json=json_body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        if isinstance(route, httpx.Response):
            return httpx.Response(
                route.status_code, headers=route.headers, content=route.content
            )
        return route(request)

    def paths(self, method: Optional[str] = None) -> list[str]:
        return [r.url.path for r in self.requests if method is None or r.method == method]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def fake_api(monkeypatch: pytest.MonkeyPatch) -> FakeAPI:
    """Route every Transport the CLI creates to a :class:`FakeAPI`."""
    api = FakeAPI()
    monkeypatch.setattr(
        "spacectl.context.Transport",
        functools.partial(Transport, transport=api.transport()),
    )
    return api


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
