"""Exception hierarchy for spacectl.

All exceptions inherit from :class:`SpacectlError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`spacectl.exit_codes`.
The top-level handler in :func:`spacectl.app.main` catches ``SpacectlError``
and exits with the matching code; anything else produces a crash log.

Subclass hierarchy::

    SpacectlError (exit 1)
    +-- ConfigurationError  (exit 2)
    +-- AuthError           (exit 3)
    |   +-- AuthExpiredError (exit 3)
    +-- APIError            (exit 3 / 4 / 5 / 1, by HTTP status)
    +-- NetworkError        (exit 6)
    +-- SerializationError  (exit 7)
"""

from __future__ import annotations

from spacectl.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERIALIZATION_ERROR,
    EXIT_SERVER_ERROR,
)


class SpacectlError(Exception):
    """Base exception for all spacectl errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`spacectl.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code

    def with_context(self, context: str) -> SpacectlError:
        """Return a copy of this error with *context* prefixed to the message.

        The copy keeps the concrete class and exit code so the command layer
        can add detail without changing the kind of failure.
        """
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        Exception.__init__(clone, f"{context}: {self}")
        return clone


class ConfigurationError(SpacectlError):
    """Raised for bad CLI input, unsupported output formats, or an unusable config file."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(SpacectlError):
    """Raised when the user is not logged in or a login attempt fails."""

    exit_code = EXIT_AUTH_FAILURE


class AuthExpiredError(AuthError):
    """Raised when the refresh token is rejected.

    By the time this is raised the stored tokens have already been wiped, so
    the next command does not repeat the failed refresh.
    """


class APIError(SpacectlError):
    """Raised when the API answers with a non-2xx status.

    Args:
        status: The HTTP status code.
        message: The ``error`` field of the JSON error envelope, or the raw
            response body when the envelope could not be parsed.
    """

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"API error (HTTP {status}): {message}", _exit_code_for_status(status))


class NetworkError(SpacectlError):
    """Raised on transport failures before any response is received (DNS, refused, timeout)."""

    exit_code = EXIT_CONNECTION_ERROR


class SerializationError(SpacectlError):
    """Raised when a request body cannot be encoded or a response body cannot be decoded."""

    exit_code = EXIT_SERIALIZATION_ERROR


def _exit_code_for_status(status: int) -> int:
    if status in (401, 403):
        return EXIT_AUTH_FAILURE
    if status == 404:
        return EXIT_NOT_FOUND
    if status >= 500:
        return EXIT_SERVER_ERROR
    return EXIT_GENERIC_FAILURE
