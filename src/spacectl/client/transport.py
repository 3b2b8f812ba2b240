"""Authenticated HTTP transport with transparent token refresh.

This module provides :class:`Transport`, the only component that talks to
the network. It wraps :class:`httpx.Client` and layers on:

- **Bearer auth** -- the stored access token is attached to every request.
- **Refresh-and-retry** -- a 401 triggers exactly one refresh cycle against
  ``POST /api/v1/user/refresh``; if it succeeds the identical request is
  re-sent once with the new token. A rejected refresh wipes the stored
  tokens before :class:`~spacectl.exceptions.AuthExpiredError` is raised.
- **Debug echo** -- with ``debug=True`` every request and response line is
  written to stderr, with secrets in bodies masked by
  :func:`~spacectl.client.redact.redact_body`.
- **Error mapping** -- transport failures become
  :class:`~spacectl.exceptions.NetworkError`.

Interpreting the response (decoding 2xx bodies, mapping error envelopes) is
left to :mod:`spacectl.client.response`.

The refresh cycle is not synchronised across threads. Two requests sharing
one :class:`~spacectl.config.CredentialStore` that hit 401 concurrently will
both refresh and the last save wins. The CLI issues one request at a time.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from spacectl.client.redact import redact_body
from spacectl.config import CredentialStore
from spacectl.exceptions import (
    AuthExpiredError,
    ConfigurationError,
    NetworkError,
    SerializationError,
)
from spacectl.models import LoginResponse, RefreshTokenRequest
from spacectl.output import get_output

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
REFRESH_PATH = "/api/v1/user/refresh"
DEBUG_PREFIX = "[spacectl]"


class Transport:
    """HTTP transport bound to one API base URL and one credential store.

    Must be used as a context manager so that the underlying connection
    pool is opened and closed deterministically.

    Args:
        store: Credential store providing tokens. Refreshed tokens are
            written back through it.
        base_url: API base URL. Defaults to the store's ``api_url``.
        debug: Echo requests and responses to stderr.
        timeout: Per-request timeout in seconds, including the refresh call.
        cli_name: Command name used in the "please log in again" message.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        with Transport(CredentialStore()) as transport:
            response = transport.execute("GET", "/api/v1/organizations")
    """

    def __init__(
        self,
        store: CredentialStore,
        base_url: Optional[str] = None,
        debug: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        cli_name: str = "spacectl",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._store = store
        self._base_url = (base_url or store.config.api_url).rstrip("/")
        self._debug = debug
        self._timeout = timeout
        self._cli_name = cli_name
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def base_url(self) -> str:
        """The API base URL requests are sent to."""
        return self._base_url

    @property
    def store(self) -> CredentialStore:
        """The credential store this transport reads tokens from."""
        return self._store

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Transport:
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            follow_redirects=False,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def execute(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one logical request, refreshing the session once on 401.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            path: URL path appended to the base URL.
            body: Optional JSON body: a pydantic model (``None`` fields are
                omitted), or any JSON-serialisable value.
            params: Optional query parameters.

        Returns:
            The final :class:`httpx.Response`, whatever its status. The
            body has been read, so the response needs no further closing.

        Raises:
            SerializationError: If *body* cannot be encoded as JSON.
            NetworkError: If no response could be obtained.
            AuthExpiredError: If the 401 refresh cycle was rejected.
        """
        payload = _encode_body(body)

        response = self._send(method, path, payload, params)
        if response.status_code == 401 and self._store.config.refresh_token:
            response.close()
            logger.debug("Got 401 for %s %s, refreshing access token", method, path)
            self._refresh()
            response = self._send(method, path, payload, params)
        return response

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.Client:
        assert self._client is not None, "Transport not open -- use as context manager"
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        access_token = self._store.config.access_token
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _send(
        self,
        method: str,
        path: str,
        payload: Optional[bytes],
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Issue a single HTTP exchange with the current token."""
        request = self._http().build_request(
            method,
            path,
            content=payload,
            params=params,
            headers=self._headers(),
        )
        self._echo_request(request, payload)
        try:
            response = self._http().send(request)
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"Request failed: could not reach {request.url}: {exc}"
            ) from exc
        self._echo_response(request, response)
        return response

    def _refresh(self) -> None:
        """Exchange the stored refresh token for a new token pair.

        Posts directly through the underlying client so a 401 from the
        refresh endpoint is never itself retried.

        Raises:
            AuthExpiredError: If the endpoint answers non-200 or returns an
                unusable body. The stored tokens are wiped and saved first.
            NetworkError: If the refresh endpoint cannot be reached.
            ConfigurationError: If the new tokens cannot be saved.
        """
        payload = _encode_body(
            RefreshTokenRequest(refresh_token=self._store.config.refresh_token)
        )
        request = self._http().build_request(
            "POST",
            REFRESH_PATH,
            content=payload,
            headers={"Content-Type": "application/json"},
        )
        self._echo_request(request, payload)
        try:
            response = self._http().send(request)
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"Token refresh failed: could not reach {request.url}: {exc}"
            ) from exc
        self._echo_response(request, response)

        if response.status_code != 200:
            logger.debug("Refresh rejected with HTTP %s, clearing stored tokens", response.status_code)
            self._forget_tokens()
            raise AuthExpiredError(
                f"session expired (HTTP {response.status_code}). "
                f"Please run '{self._cli_name} auth login' to re-authenticate"
            )

        try:
            tokens = LoginResponse.model_validate_json(response.content)
        except ValidationError as exc:
            logger.debug("Refresh response unreadable, clearing stored tokens")
            self._forget_tokens()
            raise AuthExpiredError(
                f"token refresh returned an unreadable response ({exc.error_count()} errors). "
                f"Please run '{self._cli_name} auth login' to re-authenticate"
            ) from exc

        self._store.update_tokens(tokens.access_token, tokens.refresh_token, tokens.user.email)
        self._store.save()

    def _forget_tokens(self) -> None:
        """Wipe the stored tokens and persist, logging a failed save.

        The session is over either way; a save failure must not replace the
        :class:`AuthExpiredError` the caller is about to raise.
        """
        self._store.clear_auth()
        try:
            self._store.save()
        except ConfigurationError as exc:
            logger.warning("Could not persist cleared tokens: %s", exc)

    def _echo_request(self, request: httpx.Request, payload: Optional[bytes]) -> None:
        if not self._debug:
            return
        output = get_output()
        output.debug(f"{DEBUG_PREFIX} -> {request.method} {request.url}")
        if payload:
            output.debug(f"   body: {redact_body(payload)}")

    def _echo_response(self, request: httpx.Request, response: httpx.Response) -> None:
        if not self._debug:
            return
        get_output().debug(
            f"{DEBUG_PREFIX} <- {request.method} {request.url} : {response.status_code}"
        )


def _encode_body(body: Any) -> Optional[bytes]:
    """Serialise a request body to UTF-8 JSON bytes."""
    if body is None:
        return None
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", exclude_none=True)
    try:
        return json.dumps(body, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to encode request body: {exc}") from exc
