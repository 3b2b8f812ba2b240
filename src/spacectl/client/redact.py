"""Masking of secrets in request bodies echoed by ``--debug``.

Any JSON object key matching (case-insensitively) one of
:data:`SENSITIVE_KEYS`, at any depth and inside arrays, has its value
replaced by :data:`REDACTED`. Everything else keeps its structure, order
and values. Bodies that are not valid JSON are returned unchanged.

Example::

    >>> redact_body('{"email": "a@b.c", "Password": "hunter2"}')
    '{"email": "a@b.c", "Password": "***REDACTED***"}'
"""

from __future__ import annotations

import json
from typing import Any, Union

REDACTED = "***REDACTED***"

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "pass",
        "pwd",
        "access_token",
        "refresh_token",
        "token",
        "authorization",
    }
)


def redact_value(value: Any) -> Any:
    """Return a copy of a decoded JSON value with sensitive keys masked."""
    if isinstance(value, dict):
        return {
            key: REDACTED if key.lower() in SENSITIVE_KEYS else redact_value(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    return value


class _RawNumber(str):
    """A JSON number kept as its source text so re-encoding is lossless."""


def _encode(value: Any) -> str:
    if isinstance(value, _RawNumber):
        return str(value)
    if isinstance(value, dict):
        members = ", ".join(
            f"{json.dumps(key, ensure_ascii=False)}: {_encode(item)}" for key, item in value.items()
        )
        return "{" + members + "}"
    if isinstance(value, list):
        return "[" + ", ".join(_encode(item) for item in value) + "]"
    return json.dumps(value, ensure_ascii=False)


def redact_body(body: Union[str, bytes]) -> str:
    """Redact a raw JSON request or response body for logging.

    Numbers are carried through as their original text, so ``1.10`` or
    ``1e5`` in a non-sensitive field is echoed exactly as sent.

    Args:
        body: The raw body. Bytes are decoded as UTF-8 (invalid sequences
            replaced) before parsing.

    Returns:
        The re-encoded JSON with secrets masked, or the body text
        unchanged when it is not valid JSON.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        parsed = json.loads(text, parse_float=_RawNumber, parse_int=_RawNumber)
    except ValueError:
        return text
    return _encode(redact_value(parsed))
