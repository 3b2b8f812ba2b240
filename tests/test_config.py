"""Tests for spacectl.config -- Config model, paths, atomic writes, CredentialStore."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from spacectl.config import (
    Config,
    CredentialStore,
    atomic_write,
    default_config_path,
    get_data_dir,
)
from spacectl.exceptions import ConfigurationError


# ---------------------------------------------------------------------------
# Config model
# ---------------------------------------------------------------------------


class TestConfigModel:
    def test_defaults(self) -> None:
        config = Config()
        assert config.api_url == "http://localhost:8080"
        assert config.access_token == ""
        assert config.default_cloud == "eks"
        assert config.default_region == "eu"
        assert config.default_compute == 2
        assert config.default_memory == 4

    def test_authenticated_requires_both_tokens(self) -> None:
        assert not Config(access_token="a").is_authenticated()
        assert not Config(refresh_token="r").is_authenticated()
        assert Config(access_token="a", refresh_token="r").is_authenticated()

    def test_clear_auth_keeps_url_and_defaults(self) -> None:
        config = Config(
            api_url="http://api.test",
            access_token="a",
            refresh_token="r",
            user_email="dev@example.com",
            default_region="us",
        )
        config.clear_auth()
        assert config.access_token == ""
        assert config.refresh_token == ""
        assert config.user_email == ""
        assert config.api_url == "http://api.test"
        assert config.default_region == "us"

    def test_update_tokens(self) -> None:
        config = Config()
        config.update_tokens("a2", "r2", "x@example.com")
        assert (config.access_token, config.refresh_token, config.user_email) == (
            "a2",
            "r2",
            "x@example.com",
        )


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class TestPaths:
    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPACECTL_CONFIG", str(tmp_path / "custom.json"))
        assert default_config_path() == tmp_path / "custom.json"

    def test_home_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SPACECTL_CONFIG", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert default_config_path() == tmp_path / ".spacectl"

    def test_data_dir_xdg(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spacectl.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
        result = get_data_dir()
        assert result == tmp_path / "xdg" / "spacectl"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_parent_and_sets_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "dir" / "file.json"
        atomic_write(target, "{}")
        assert target.read_text() == "{}"
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o600

    def test_replaces_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("old")
        atomic_write(target, "new")
        assert target.read_text() == "new"

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        atomic_write(target, "data")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["file.txt"]


# ---------------------------------------------------------------------------
# CredentialStore
# ---------------------------------------------------------------------------


class TestCredentialStore:
    def test_missing_file_gives_defaults(self, store: CredentialStore) -> None:
        assert store.config == Config()
        assert not store.path.exists()
        assert not store.is_authenticated()

    def test_save_load_round_trip(self, store: CredentialStore) -> None:
        config = Config(
            api_url="https://api.example.com",
            access_token="acc",
            refresh_token="ref",
            user_email="dev@example.com",
            default_cloud="gke",
            default_region="us",
            default_compute=8,
            default_memory=16,
        )
        store.save(config)

        reloaded = CredentialStore(store.path).load()
        assert reloaded == config

    def test_saved_file_is_owner_only(self, store: CredentialStore) -> None:
        store.update_tokens("acc", "ref", "dev@example.com")
        store.save()
        assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600

    def test_saved_file_uses_wire_field_names(self, store: CredentialStore) -> None:
        store.update_tokens("acc", "ref", "dev@example.com")
        store.save()
        data = json.loads(store.path.read_text())
        assert set(data) == {
            "api_url",
            "access_token",
            "refresh_token",
            "user_email",
            "default_cloud",
            "default_region",
            "default_compute",
            "default_memory",
        }

    def test_load_is_idempotent(self, logged_in: CredentialStore) -> None:
        first = logged_in.load()
        second = logged_in.load()
        assert first == second

    def test_partial_file_fills_defaults(self, isolated_config: Path) -> None:
        isolated_config.write_text(json.dumps({"api_url": "http://api.test"}))
        config = CredentialStore(isolated_config).config
        assert config.api_url == "http://api.test"
        assert config.default_cloud == "eks"

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        isolated_config.write_text("{not json")
        with pytest.raises(ConfigurationError, match=str(isolated_config)):
            CredentialStore(isolated_config).load()

    def test_non_utf8_file_raises(self, isolated_config: Path) -> None:
        isolated_config.write_bytes(b"\xff\xfe{\"api_url\": 1}")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            CredentialStore(isolated_config).load()

    def test_invalid_field_type_raises(self, isolated_config: Path) -> None:
        isolated_config.write_text(json.dumps({"default_compute": "many"}))
        with pytest.raises(ConfigurationError):
            CredentialStore(isolated_config).load()

    def test_clear_auth_then_save(self, logged_in: CredentialStore) -> None:
        assert logged_in.is_authenticated()
        logged_in.clear_auth()
        logged_in.save()
        assert not CredentialStore(logged_in.path).is_authenticated()

    def test_save_failure_raises_configuration_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = CredentialStore(blocker / "config.json")
        with pytest.raises(ConfigurationError, match="Failed to save config"):
            store.save()
