"""Interpretation of transport outcomes.

:class:`~spacectl.client.transport.Transport` returns raw responses; the
resource clients pass them through :func:`handle_response` (JSON bodies) or
:func:`handle_text_response` (raw text bodies such as kubeconfigs) to get
either a decoded value or a typed exception.

Non-2xx responses are mapped to :class:`~spacectl.exceptions.APIError`
with the message taken from the ``{"error": "..."}`` envelope when present,
or the raw body text otherwise.
"""

from __future__ import annotations

import json
from typing import Any, Optional, TypeVar, get_origin, overload

import httpx
from pydantic import TypeAdapter, ValidationError

from spacectl.exceptions import APIError, SerializationError

T = TypeVar("T")


@overload
def handle_response(response: httpx.Response, model: None = None) -> None: ...


@overload
def handle_response(response: httpx.Response, model: type[T]) -> T: ...


def handle_response(response: httpx.Response, model: Any = None) -> Any:
    """Decode a JSON response into *model*, or raise for error statuses.

    Args:
        response: The response returned by the transport.
        model: A type understood by :class:`pydantic.TypeAdapter` (a model
            class, ``list[Model]``, ``list[str]``, ...). When ``None`` the
            body is ignored and only the status is checked.

    Returns:
        The validated value, or ``None`` when *model* is ``None``. A
        ``null`` body decodes to ``[]`` when *model* is a list type, as
        the API encodes empty collections that way.

    Raises:
        APIError: For any non-2xx status.
        SerializationError: If a 2xx body does not match *model*.
    """
    raise_for_status(response)
    if model is None:
        return None
    try:
        if get_origin(model) is list:
            items = TypeAdapter(Optional[model]).validate_json(response.content)
            return items if items is not None else []
        return TypeAdapter(model).validate_json(response.content)
    except ValidationError as exc:
        raise SerializationError(f"Failed to decode response body: {exc}") from exc


def handle_text_response(response: httpx.Response) -> str:
    """Return the body of a successful response as text.

    Raises:
        APIError: For any non-2xx status.
    """
    raise_for_status(response)
    return response.text


def raise_for_status(response: httpx.Response) -> None:
    """Raise :class:`APIError` unless *response* has a 2xx status."""
    if 200 <= response.status_code < 300:
        return
    raise APIError(response.status_code, extract_error_message(response))


def extract_error_message(response: httpx.Response) -> str:
    """Return the ``error`` field of a JSON error envelope, else the raw body."""
    message: Optional[str] = None
    try:
        detail = json.loads(response.content)
    except ValueError:
        detail = None
    if isinstance(detail, dict) and isinstance(detail.get("error"), str):
        message = detail["error"]
    if message is None:
        message = response.text
    return message
