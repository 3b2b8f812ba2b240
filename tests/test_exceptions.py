"""Tests for the exception hierarchy and its exit codes."""

from __future__ import annotations

import pytest

from spacectl.exceptions import (
    APIError,
    AuthError,
    AuthExpiredError,
    ConfigurationError,
    NetworkError,
    SerializationError,
    SpacectlError,
)


@pytest.mark.parametrize(
    "exc,code",
    [
        (SpacectlError("x"), 1),
        (ConfigurationError("x"), 2),
        (AuthError("x"), 3),
        (AuthExpiredError("x"), 3),
        (NetworkError("x"), 6),
        (SerializationError("x"), 7),
    ],
)
def test_exit_codes(exc: SpacectlError, code: int) -> None:
    assert exc.exit_code == code


def test_exit_code_override() -> None:
    assert SpacectlError("gone", 4).exit_code == 4
    assert SpacectlError("other").exit_code == 1


class TestWithContext:
    def test_prefixes_message(self) -> None:
        err = NetworkError("could not reach host").with_context("failed to list tenants")
        assert str(err) == "failed to list tenants: could not reach host"

    def test_keeps_class_and_exit_code(self) -> None:
        err = AuthExpiredError("session expired").with_context("failed to list organizations")
        assert isinstance(err, AuthExpiredError)
        assert err.exit_code == 3

    def test_keeps_api_fields(self) -> None:
        original = APIError(404, "tenant not found")
        err = original.with_context("failed to get tenant")
        assert isinstance(err, APIError)
        assert (err.status, err.message, err.exit_code) == (404, "tenant not found", 4)
        assert str(err) == "failed to get tenant: API error (HTTP 404): tenant not found"
        assert str(original) == "API error (HTTP 404): tenant not found"
