"""Tests for debug-log redaction of request bodies."""

from __future__ import annotations

import json

import pytest

from spacectl.client.redact import REDACTED, SENSITIVE_KEYS, redact_body, redact_value


class TestRedactValue:
    @pytest.mark.parametrize("key", sorted(SENSITIVE_KEYS))
    def test_every_sensitive_key_is_masked(self, key: str) -> None:
        assert redact_value({key: "secret"}) == {key: REDACTED}

    def test_match_is_case_insensitive(self) -> None:
        result = redact_value({"Password": "a", "ACCESS_TOKEN": "b", "Authorization": "c"})
        assert set(result.values()) == {REDACTED}

    def test_nested_objects_and_arrays(self) -> None:
        doc = {
            "user": {"email": "dev@example.com", "credentials": {"pwd": "x"}},
            "sessions": [{"token": "t1", "id": 1}, {"token": "t2", "id": 2}],
        }
        assert redact_value(doc) == {
            "user": {"email": "dev@example.com", "credentials": {"pwd": REDACTED}},
            "sessions": [{"token": REDACTED, "id": 1}, {"token": REDACTED, "id": 2}],
        }

    def test_masks_whole_subtree_under_sensitive_key(self) -> None:
        assert redact_value({"token": {"value": "x"}}) == {"token": REDACTED}

    def test_similar_keys_are_kept(self) -> None:
        doc = {"passport": "p", "token_type": "bearer", "email": "e"}
        assert redact_value(doc) == doc

    def test_does_not_mutate_input(self) -> None:
        doc = {"password": "x"}
        redact_value(doc)
        assert doc == {"password": "x"}


class TestRedactBody:
    def test_login_body(self) -> None:
        body = json.dumps({"email": "dev@example.com", "password": "hunter2"})
        assert json.loads(redact_body(body)) == {
            "email": "dev@example.com",
            "password": REDACTED,
        }

    def test_bytes_input(self) -> None:
        out = redact_body(b'{"refresh_token": "r"}')
        assert out == '{"refresh_token": "***REDACTED***"}'

    def test_preserves_key_order_and_leaves(self) -> None:
        body = '{"z": 1, "password": "x", "a": [true, null, 2.5, "s"]}'
        out = redact_body(body)
        assert list(json.loads(out)) == ["z", "password", "a"]
        assert json.loads(out)["a"] == [True, None, 2.5, "s"]

    def test_top_level_array(self) -> None:
        out = redact_body('[{"pass": "x"}, {"name": "n"}]')
        assert json.loads(out) == [{"pass": REDACTED}, {"name": "n"}]

    @pytest.mark.parametrize("body", ["not json", "{broken", "password=hunter2", ""])
    def test_invalid_json_unchanged(self, body: str) -> None:
        assert redact_body(body) == body

    @pytest.mark.parametrize(
        "body",
        [
            '{"n": 1.10, "m": 1e5}',
            '{"big": 12345678901234567890123, "neg": -0, "exp": 2.5E-3}',
            '[1.000, {"x": [0.1, 10]}]',
        ],
    )
    def test_numbers_echoed_as_sent(self, body: str) -> None:
        assert redact_body(body) == body

    def test_numbers_kept_next_to_masked_secret(self) -> None:
        out = redact_body('{"password": "x", "quota": 4.50}')
        assert out == '{"password": "***REDACTED***", "quota": 4.50}'

    def test_non_ascii_kept(self) -> None:
        assert json.loads(redact_body('{"name": "Zoë"}')) == {"name": "Zoë"}
