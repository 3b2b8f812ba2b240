"""Tests for the authenticated transport: bearer auth, refresh-and-retry, debug echo."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from spacectl.client.transport import REFRESH_PATH, Transport
from spacectl.config import CredentialStore
from spacectl.exceptions import (
    AuthExpiredError,
    ConfigurationError,
    NetworkError,
    SerializationError,
)
from spacectl.models import CreateTenantRequest, LoginRequest
from spacectl.output import OutputManager, set_output


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], httpx.Response]


def _login_payload(access: str, refresh: str, email: str = "dev@example.com") -> dict:
    return {
        "access_token": access,
        "refresh_token": refresh,
        "user": {"id": "u-1", "email": email},
    }


def _transport(store: CredentialStore, handler: Handler, debug: bool = False) -> Transport:
    return Transport(store, debug=debug, transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def _clean_output():
    """Install a quiet, colourless output manager for each test."""
    set_output(OutputManager(no_color=True, quiet=True))


# ---------------------------------------------------------------------------
# Context manager and base URL
# ---------------------------------------------------------------------------


class TestContextManager:
    def test_enter_creates_and_exit_closes_client(self, logged_in: CredentialStore) -> None:
        transport = Transport(logged_in)
        assert transport._client is None
        with transport:
            assert transport._client is not None
        assert transport._client is None

    def test_base_url_from_store(self, logged_in: CredentialStore) -> None:
        assert Transport(logged_in).base_url == "http://api.test"

    def test_base_url_override_strips_slash(self, logged_in: CredentialStore) -> None:
        assert Transport(logged_in, base_url="http://other.test/").base_url == "http://other.test"


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


class TestRequestBuilding:
    def test_bearer_and_content_type(self, logged_in: CredentialStore) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        with _transport(logged_in, handler) as transport:
            response = transport.execute("GET", "/api/v1/organizations")

        assert response.status_code == 200
        assert str(seen[0].url) == "http://api.test/api/v1/organizations"
        assert seen[0].headers["Authorization"] == "Bearer acc-1"
        assert seen[0].headers["Content-Type"] == "application/json"

    def test_no_authorization_without_token(self, store: CredentialStore) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        with _transport(store, handler) as transport:
            transport.execute("POST", "/api/v1/user/login", LoginRequest(email="e", password="p"))

        assert "Authorization" not in seen[0].headers
        assert json.loads(seen[0].content) == {"email": "e", "password": "p"}

    def test_model_body_omits_none_fields(self, logged_in: CredentialStore) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={})

        body = CreateTenantRequest(
            name="dev",
            cloud_provider="eks",
            region="eu",
            kubernetes_version="1.30",
            compute_quota=2,
            memory_quota_gb=4,
        )
        with _transport(logged_in, handler) as transport:
            transport.execute("POST", "/api/v1/projects/p1/tenants", body)

        assert "namespace_suffix" not in json.loads(seen[0].content)

    def test_query_params(self, logged_in: CredentialStore) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        with _transport(logged_in, handler) as transport:
            transport.execute("GET", "/api/v1/tenants/regions", params={"cloud_provider": "eks"})

        assert seen[0].url.params["cloud_provider"] == "eks"

    def test_unencodable_body(self, logged_in: CredentialStore) -> None:
        with _transport(logged_in, lambda r: httpx.Response(200)) as transport:
            with pytest.raises(SerializationError, match="Failed to encode request body"):
                transport.execute("POST", "/x", {"bad": object()})

    def test_error_status_is_returned_not_raised(self, logged_in: CredentialStore) -> None:
        handler = lambda r: httpx.Response(404, json={"error": "not found"})  # noqa: E731
        with _transport(logged_in, handler) as transport:
            assert transport.execute("GET", "/missing").status_code == 404


# ---------------------------------------------------------------------------
# Refresh and retry
# ---------------------------------------------------------------------------


class TestRefreshAndRetry:
    def test_401_refresh_then_single_retry_with_new_token(
        self, logged_in: CredentialStore
    ) -> None:
        calls: list[tuple[str, str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(
                (request.method, request.url.path, request.headers.get("Authorization", ""))
            )
            if request.url.path == REFRESH_PATH:
                assert json.loads(request.content) == {"refresh_token": "ref-1"}
                return httpx.Response(200, json=_login_payload("acc-2", "ref-2"))
            if request.headers.get("Authorization") == "Bearer acc-1":
                return httpx.Response(401, json={"error": "token expired"})
            return httpx.Response(200, json=[{"ok": True}])

        with _transport(logged_in, handler) as transport:
            response = transport.execute("GET", "/api/v1/organizations")

        assert response.status_code == 200
        assert calls == [
            ("GET", "/api/v1/organizations", "Bearer acc-1"),
            ("POST", REFRESH_PATH, ""),
            ("GET", "/api/v1/organizations", "Bearer acc-2"),
        ]
        saved = json.loads(logged_in.path.read_text())
        assert saved["access_token"] == "acc-2"
        assert saved["refresh_token"] == "ref-2"

    def test_retry_resends_identical_body(self, logged_in: CredentialStore) -> None:
        bodies: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == REFRESH_PATH:
                return httpx.Response(200, json=_login_payload("acc-2", "ref-2"))
            bodies.append(request.content)
            status = 401 if len(bodies) == 1 else 201
            return httpx.Response(status, json={})

        with _transport(logged_in, handler) as transport:
            transport.execute("POST", "/api/v1/organizations", {"name": "acme"})

        assert len(bodies) == 2
        assert bodies[0] == bodies[1]

    def test_retry_401_is_returned_without_second_refresh(
        self, logged_in: CredentialStore
    ) -> None:
        refreshes = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == REFRESH_PATH:
                refreshes.append(request)
                return httpx.Response(200, json=_login_payload("acc-2", "ref-2"))
            return httpx.Response(401, json={"error": "still unauthorized"})

        with _transport(logged_in, handler) as transport:
            response = transport.execute("GET", "/api/v1/user/info")

        assert response.status_code == 401
        assert len(refreshes) == 1

    def test_refresh_rejected_wipes_credentials(self, logged_in: CredentialStore) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == REFRESH_PATH:
                return httpx.Response(403, json={"error": "refresh token revoked"})
            return httpx.Response(401)

        with _transport(logged_in, handler) as transport:
            with pytest.raises(AuthExpiredError, match="spacectl auth login"):
                transport.execute("GET", "/api/v1/organizations")

        assert not logged_in.is_authenticated()
        assert not CredentialStore(logged_in.path).is_authenticated()
        assert CredentialStore(logged_in.path).config.api_url == "http://api.test"

    def test_refresh_unreadable_body(self, logged_in: CredentialStore) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == REFRESH_PATH:
                return httpx.Response(200, text="<html>gateway</html>")
            return httpx.Response(401)

        with _transport(logged_in, handler) as transport:
            with pytest.raises(AuthExpiredError, match="unreadable"):
                transport.execute("GET", "/api/v1/organizations")

        assert not logged_in.is_authenticated()
        assert not CredentialStore(logged_in.path).is_authenticated()

    def test_failed_wipe_still_reports_expired_session(
        self, logged_in: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing_save(config=None) -> None:
            raise ConfigurationError("Failed to save config: read-only file system")

        monkeypatch.setattr(logged_in, "save", failing_save)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == REFRESH_PATH:
                return httpx.Response(403, json={"error": "refresh token revoked"})
            return httpx.Response(401)

        with _transport(logged_in, handler) as transport:
            with pytest.raises(AuthExpiredError, match="session expired"):
                transport.execute("GET", "/api/v1/organizations")
        assert not logged_in.is_authenticated()

    def test_refresh_network_failure(self, logged_in: CredentialStore) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == REFRESH_PATH:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(401)

        with _transport(logged_in, handler) as transport:
            with pytest.raises(NetworkError, match="could not reach"):
                transport.execute("GET", "/api/v1/organizations")
        assert logged_in.is_authenticated()

    def test_401_without_refresh_token_is_returned(self, isolated_config: Path) -> None:
        isolated_config.write_text(json.dumps({"access_token": "acc-only"}))
        store = CredentialStore(isolated_config)
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(401)

        with _transport(store, handler) as transport:
            assert transport.execute("GET", "/api/v1/user/info").status_code == 401
        assert paths == ["/api/v1/user/info"]


# ---------------------------------------------------------------------------
# Network errors
# ---------------------------------------------------------------------------


class TestNetworkErrors:
    @pytest.mark.parametrize(
        "exc_type", [httpx.ConnectError, httpx.ReadTimeout, httpx.RemoteProtocolError]
    )
    def test_transport_failure_becomes_network_error(
        self, logged_in: CredentialStore, exc_type: type
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc_type("boom", request=request)

        with _transport(logged_in, handler) as transport:
            with pytest.raises(NetworkError, match="could not reach http://api.test/x") as exc_info:
                transport.execute("GET", "/x")
        assert isinstance(exc_info.value.__cause__, exc_type)


# ---------------------------------------------------------------------------
# Debug echo
# ---------------------------------------------------------------------------


class TestDebugEcho:
    def test_echo_redacts_secrets(
        self, store: CredentialStore, capsys: pytest.CaptureFixture[str]
    ) -> None:
        set_output(OutputManager(no_color=True, debug=True))
        handler = lambda r: httpx.Response(200, json={})  # noqa: E731

        with _transport(store, handler, debug=True) as transport:
            transport.execute(
                "POST", "/api/v1/user/login", LoginRequest(email="dev@example.com", password="hunter2")
            )

        err = capsys.readouterr().err.splitlines()
        assert err[0] == "[spacectl] -> POST http://localhost:8080/api/v1/user/login"
        assert err[1].startswith("   body: ")
        assert json.loads(err[1][len("   body: "):]) == {
            "email": "dev@example.com",
            "password": "***REDACTED***",
        }
        assert err[2] == "[spacectl] <- POST http://localhost:8080/api/v1/user/login : 200"
        assert "hunter2" not in "\n".join(err)

    def test_echo_covers_refresh_cycle(
        self, logged_in: CredentialStore, capsys: pytest.CaptureFixture[str]
    ) -> None:
        set_output(OutputManager(no_color=True, debug=True))

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == REFRESH_PATH:
                return httpx.Response(200, json=_login_payload("acc-2", "ref-2"))
            if request.headers.get("Authorization") == "Bearer acc-1":
                return httpx.Response(401)
            return httpx.Response(200, json=[])

        with _transport(logged_in, handler, debug=True) as transport:
            transport.execute("GET", "/api/v1/organizations")

        err = capsys.readouterr().err
        assert err.count("[spacectl] -> ") == 3
        assert ": 401" in err
        assert "ref-1" not in err

    def test_no_echo_without_debug_flag(
        self, logged_in: CredentialStore, capsys: pytest.CaptureFixture[str]
    ) -> None:
        set_output(OutputManager(no_color=True, debug=True))
        with _transport(logged_in, lambda r: httpx.Response(200)) as transport:
            transport.execute("GET", "/x")
        assert capsys.readouterr().err == ""
