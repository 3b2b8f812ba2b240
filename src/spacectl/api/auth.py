"""User account endpoints: login, registration, verification and profile."""

from __future__ import annotations

from spacectl.client.response import handle_response, raise_for_status
from spacectl.client.transport import Transport
from spacectl.exceptions import APIError
from spacectl.models import (
    LoginRequest,
    LoginResponse,
    ResendVerificationRequest,
    User,
    UserPreferences,
    VerifyEmailRequest,
)


class AuthAPI:
    """Client for ``/api/v1/user`` and ``/api/v1/auth``.

    Args:
        transport: An open :class:`~spacectl.client.Transport`.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def login(self, email: str, password: str) -> LoginResponse:
        """Exchange email and password for a token pair."""
        response = self._transport.execute(
            "POST", "/api/v1/user/login", LoginRequest(email=email, password=password)
        )
        return handle_response(response, LoginResponse)

    def register(self, email: str, password: str) -> None:
        """Create a new local account. The user must verify the email afterwards."""
        response = self._transport.execute(
            "POST", "/api/v1/user/register", LoginRequest(email=email, password=password)
        )
        handle_response(response)

    def verify_email(self, email: str, code: str) -> None:
        response = self._transport.execute(
            "POST", "/api/v1/user/verify", VerifyEmailRequest(email=email, code=code)
        )
        handle_response(response)

    def resend_verification(self, email: str) -> None:
        response = self._transport.execute(
            "POST", "/api/v1/user/verify/resend", ResendVerificationRequest(email=email)
        )
        handle_response(response)

    def get_user_info(self) -> User:
        """Return the currently authenticated user."""
        return handle_response(self._transport.execute("GET", "/api/v1/user/info"), User)

    def update_preferences(self, preferences: UserPreferences) -> None:
        response = self._transport.execute("PUT", "/api/v1/user/preferences", preferences)
        handle_response(response)

    def get_github_auth_url(self, callback_port: int) -> str:
        """Return the GitHub authorization URL for a CLI login.

        The backend answers with a redirect instead of following it; the
        ``Location`` header of the 302/307 is the URL to open in a browser.
        The callback port tells the backend's landing page where to post the
        tokens.

        Raises:
            APIError: If the backend does not answer with a redirect.
        """
        response = self._transport.execute(
            "GET",
            "/api/v1/auth/github",
            params={"cli": "true", "callback_port": str(callback_port)},
        )
        if response.status_code in (302, 307):
            location = response.headers.get("location", "")
            if location:
                return location
        raise_for_status(response)
        raise APIError(
            response.status_code,
            f"failed to get GitHub OAuth URL: status {response.status_code}",
        )
