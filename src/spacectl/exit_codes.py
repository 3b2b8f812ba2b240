"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a failure category and is referenced by the
corresponding :class:`~spacectl.exceptions.SpacectlError` subclass, so
shell scripts can branch on ``$?`` without parsing stderr.

Example::

    $ spacectl tenant get --id does-not-exist
    $ echo $?
    4   # EXIT_NOT_FOUND -- the API answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid flags, an unsupported output format, or an unreadable config file."""

EXIT_AUTH_FAILURE = 3
"""Not logged in, login rejected, or the session could not be refreshed."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""The API could not be reached (timeout, DNS failure, connection refused)."""

EXIT_SERIALIZATION_ERROR = 7
"""A request or response body could not be encoded or decoded."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
