"""GitHub browser login -- local callback server that receives the tokens.

The backend performs the OAuth code exchange itself. Its landing page then
POSTs the resulting token pair as JSON to a short-lived server on
``127.0.0.1:<port>/callback``, which hands it to the waiting CLI through a
:class:`PendingLogin`.

Flow (see :func:`github_login`):

1. Bind the callback server and serve it on a background thread. A bind
   failure settles the pending login with an error straight away.
2. Ask the backend for the GitHub authorization URL (the callback port is
   passed along) and open it in the default browser, or print it.
3. Block until the first of: tokens received, malformed payload, or the
   5 minute timeout.
4. Shut the server down with a bounded grace period, whatever the outcome.
5. Store and save the tokens.

See Also:
    :class:`spacectl.api.auth.AuthAPI.get_github_auth_url` for step 2.
"""

from __future__ import annotations

import json
import logging
import threading
import webbrowser
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from spacectl.api.auth import AuthAPI
from spacectl.config import CredentialStore
from spacectl.exceptions import AuthError, SerializationError, SpacectlError
from spacectl.output import get_output

logger = logging.getLogger(__name__)

DEFAULT_CALLBACK_PORT = 8081
LOGIN_TIMEOUT = 300.0
SHUTDOWN_GRACE = 2.0

CALLBACK_PATH = "/callback"

WAITING_PAGE = """<!DOCTYPE html>
<html>
<head><title>spacectl login</title></head>
<body style="font-family: sans-serif; text-align: center; margin-top: 4em;">
<h2>Waiting for GitHub authentication...</h2>
<p>Complete the sign-in in the GitHub tab. You can close this window afterwards.</p>
</body>
</html>
"""


@dataclass(frozen=True)
class LoginTokens:
    """Tokens handed over by the backend after a successful browser login."""

    access_token: str
    refresh_token: str
    user_email: str


class _CallbackPayload(BaseModel):
    access_token: str
    refresh_token: str
    user_email: str = ""


class PendingLogin:
    """Single-slot result of a browser login, settled at most once.

    The first call to :meth:`resolve` or :meth:`reject` wins; later calls
    return ``False`` and change nothing. :meth:`wait` blocks until the
    result is available or the timeout expires, in which case the slot is
    settled with a timeout error so late callbacks are refused.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._tokens: Optional[LoginTokens] = None
        self._error: Optional[SpacectlError] = None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def resolve(self, tokens: LoginTokens) -> bool:
        """Settle with *tokens*. Returns ``False`` if already settled."""
        return self._settle(tokens, None)

    def reject(self, error: SpacectlError) -> bool:
        """Settle with *error*. Returns ``False`` if already settled."""
        return self._settle(None, error)

    def wait(self, timeout: Optional[float] = None) -> LoginTokens:
        """Block until settled and return the tokens.

        Raises:
            AuthError: On timeout, or the error the login was rejected with.
        """
        if not self._done.wait(timeout):
            self.reject(AuthError("authentication timeout - please try again"))
        if self._error is not None:
            raise self._error
        assert self._tokens is not None
        return self._tokens

    def _settle(self, tokens: Optional[LoginTokens], error: Optional[SpacectlError]) -> bool:
        with self._lock:
            if self._done.is_set():
                return False
            self._tokens = tokens
            self._error = error
            self._done.set()
            return True


def _make_handler(pending: PendingLogin) -> type[BaseHTTPRequestHandler]:
    """Build a request handler class bound to *pending*."""

    class CallbackHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            if self._route() == "/":
                self._send(200, WAITING_PAGE.encode("utf-8"), "text/html; charset=utf-8")
            elif self._route() == CALLBACK_PATH:
                self._send(405, cors=True)
            else:
                self._send(404)

        def do_OPTIONS(self) -> None:
            if self._route() == CALLBACK_PATH:
                self._send(200, cors=True)
            else:
                self._send(404)

        def do_POST(self) -> None:
            if self._route() != CALLBACK_PATH:
                self._send(404)
                return

            try:
                length = int(self.headers.get("Content-Length", "0") or "0")
                raw = self.rfile.read(length) if length > 0 else b""
                payload = _CallbackPayload.model_validate_json(raw)
            except (ValueError, ValidationError) as exc:
                pending.reject(
                    SerializationError(f"GitHub login failed: invalid token payload: {exc}")
                )
                self._send_json(400, {"error": "invalid token payload"})
                return

            tokens = LoginTokens(
                access_token=payload.access_token,
                refresh_token=payload.refresh_token,
                user_email=payload.user_email,
            )
            if pending.resolve(tokens):
                self._send_json(200, {"status": "success"})
            else:
                self._send_json(409, {"error": "login already completed"})

        def _method_not_allowed(self) -> None:
            self._send(405, cors=self._route() == CALLBACK_PATH)

        do_PUT = _method_not_allowed
        do_PATCH = _method_not_allowed
        do_DELETE = _method_not_allowed

        def _route(self) -> str:
            return self.path.split("?", 1)[0]

        def _send_json(self, status: int, body: dict[str, Any]) -> None:
            self._send(status, json.dumps(body).encode("utf-8"), "application/json", cors=True)

        def _send(
            self,
            status: int,
            body: bytes = b"",
            content_type: Optional[str] = None,
            cors: bool = False,
        ) -> None:
            self.send_response(status)
            if cors:
                self.send_header("Access-Control-Allow-Origin", "*")
                self.send_header("Access-Control-Allow-Methods", "POST, OPTIONS")
                self.send_header("Access-Control-Allow-Headers", "Content-Type")
            if content_type:
                self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            if body:
                self.wfile.write(body)

        def log_message(self, format: str, *args: Any) -> None:
            logger.debug("callback server: " + format, *args)

    return CallbackHandler


class CallbackServer:
    """Local HTTP listener that completes a :class:`PendingLogin`.

    Use as a context manager: entering binds and starts serving, leaving
    shuts the listener down and releases the port.

    Args:
        port: TCP port to bind. ``0`` picks a free port (see :attr:`port`).
        host: Interface to bind. Loopback only by default.
        grace: Seconds to wait for an in-flight request during shutdown.

    Example::

        with CallbackServer(8081) as server:
            tokens = server.pending.wait(timeout=300)
    """

    def __init__(
        self,
        port: int = DEFAULT_CALLBACK_PORT,
        host: str = "127.0.0.1",
        grace: float = SHUTDOWN_GRACE,
    ) -> None:
        self._host = host
        self._port = port
        self._grace = grace
        self.pending = PendingLogin()
        self._server: Optional[HTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        """The bound port, or the requested one when not bound."""
        if self._server is not None:
            return self._server.server_address[1]
        return self._port

    def start(self) -> None:
        """Bind and serve in a daemon thread.

        A bind failure does not raise; it rejects :attr:`pending` so the
        caller sees it on the first :meth:`PendingLogin.wait`.
        """
        try:
            self._server = HTTPServer((self._host, self._port), _make_handler(self.pending))
        except OSError as exc:
            self.pending.reject(
                AuthError(f"failed to start callback server on {self._host}:{self._port}: {exc}")
            )
            return
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"poll_interval": 0.1},
            name="spacectl-callback",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Callback server listening on %s:%s", self._host, self.port)

    def shutdown(self) -> None:
        """Stop serving and close the socket, waiting at most ``grace`` seconds."""
        server, self._server = self._server, None
        if server is None:
            return
        stopper = threading.Thread(target=server.shutdown, daemon=True)
        stopper.start()
        stopper.join(self._grace)
        server.server_close()
        if self._thread is not None:
            self._thread.join(self._grace)
            self._thread = None
        logger.debug("Callback server stopped")

    def __enter__(self) -> CallbackServer:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()


def github_login(
    auth_api: AuthAPI,
    store: CredentialStore,
    port: int = DEFAULT_CALLBACK_PORT,
    timeout: float = LOGIN_TIMEOUT,
    open_browser: Callable[[str], bool] = webbrowser.open,
) -> LoginTokens:
    """Run the GitHub browser login and persist the received tokens.

    Args:
        auth_api: Client used to obtain the authorization URL.
        store: Credential store the tokens are saved to.
        port: Local callback port announced to the backend.
        timeout: Seconds to wait for the browser handoff.
        open_browser: Callable that opens a URL and returns ``True`` on
            success. Defaults to :func:`webbrowser.open`.

    Returns:
        The tokens received from the backend.

    Raises:
        AuthError: If the callback server cannot bind or the wait times out.
        SerializationError: If the backend posts a malformed payload.
        APIError: If the backend does not return an authorization URL.
        ConfigurationError: If the tokens cannot be saved.
    """
    output = get_output()
    with CallbackServer(port) as server:
        if server.pending.done:
            server.pending.wait(0)

        auth_url = auth_api.get_github_auth_url(server.port)
        try:
            opened = open_browser(auth_url)
        except webbrowser.Error:
            opened = False
        if opened:
            output.info("Opening browser for GitHub authentication...")
        else:
            output.warning(f"Could not open a browser. Please open this URL:\n{auth_url}")

        output.info("Waiting for GitHub authentication...")
        tokens = server.pending.wait(timeout)

    store.update_tokens(tokens.access_token, tokens.refresh_token, tokens.user_email)
    store.save()
    return tokens
