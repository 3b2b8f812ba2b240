"""Credential store: the persisted ``~/.spacectl`` config file.

The file is a single JSON object holding the API base URL, the current
access/refresh token pair, the logged-in user's email and a few defaults
used when creating tenants::

    {
      "api_url": "http://localhost:8080",
      "access_token": "...",
      "refresh_token": "...",
      "user_email": "dev@example.com",
      "default_cloud": "eks",
      "default_region": "eu",
      "default_compute": 2,
      "default_memory": 4
    }

:class:`CredentialStore` is the only owner of the in-memory :class:`Config`.
The HTTP transport borrows the store to read tokens and to persist refreshed
ones; no other component keeps a copy.

All writes use a temp-file-then-rename strategy with ``0o600`` permissions
applied before any secret is written, so tokens are never group- or
world-readable, even momentarily.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from spacectl.exceptions import ConfigurationError

_APP_NAME = "spacectl"
_CONFIG_ENV_VAR = "SPACECTL_CONFIG"

DEFAULT_API_URL = "http://localhost:8080"


class Config(BaseModel):
    """In-memory form of the config file.

    Attributes:
        api_url: Base URL of the management API.
        access_token: Short-lived bearer token; empty when logged out.
        refresh_token: Token exchanged for a new access token on HTTP 401.
        user_email: Email of the logged-in user.
        default_cloud: Cloud provider used by ``tenant create`` when
            ``--cloud`` is omitted.
        default_region: Region used when ``--region`` is omitted.
        default_compute: Compute quota (cores) used when ``--compute`` is omitted.
        default_memory: Memory quota (GB) used when ``--memory`` is omitted.
    """

    api_url: str = Field(default=DEFAULT_API_URL, description="API base URL")
    access_token: str = Field(default="", description="Bearer access token")
    refresh_token: str = Field(default="", description="Refresh token")
    user_email: str = Field(default="", description="Logged-in user's email")
    default_cloud: str = Field(default="eks", description="Default tenant cloud provider")
    default_region: str = Field(default="eu", description="Default tenant region")
    default_compute: int = Field(default=2, description="Default tenant compute quota")
    default_memory: int = Field(default=4, description="Default tenant memory quota (GB)")

    def is_authenticated(self) -> bool:
        """Return ``True`` when both tokens are present."""
        return bool(self.access_token) and bool(self.refresh_token)

    def clear_auth(self) -> None:
        """Wipe tokens and the user email. Does not persist."""
        self.access_token = ""
        self.refresh_token = ""
        self.user_email = ""

    def update_tokens(self, access_token: str, refresh_token: str, user_email: str) -> None:
        """Replace the token pair and user email. Does not persist."""
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.user_email = user_email


# --- Paths ---


def default_config_path() -> Path:
    """Return the config file path.

    ``$SPACECTL_CONFIG`` wins when set; otherwise ``~/.spacectl``.
    """
    env_value = os.environ.get(_CONFIG_ENV_VAR, "")
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / f".{_APP_NAME}"


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory used for crash logs, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/spacectl/`` (default ``~/.local/share/spacectl/``).
    On macOS/Windows: ``~/.local/spacectl/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    env_value = os.environ.get("XDG_DATA_HOME", "") if _is_xdg_platform() else ""
    if env_value:
        path = Path(env_value) / _APP_NAME
    else:
        path = Path.home() / ".local" / "share" / _APP_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: int = 0o600) -> None:
    """Write *data* to *path* atomically with the given permission bits.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. Permissions are
    applied before content is written. On any failure the temp file is
    removed and the exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Store ---


class CredentialStore:
    """Load and persist the :class:`Config` at a fixed path.

    The config is loaded lazily on first access to :attr:`config`. Mutating
    helpers (:meth:`update_tokens`, :meth:`clear_auth`) only change the
    in-memory state; callers persist with :meth:`save` once the mutation is
    complete (login, refresh, logout).

    Args:
        path: Config file location. Defaults to :func:`default_config_path`.

    Example::

        store = CredentialStore()
        store.update_tokens("acc", "ref", "dev@example.com")
        store.save()
        assert CredentialStore().is_authenticated()
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else default_config_path()
        self._config: Optional[Config] = None

    @property
    def path(self) -> Path:
        """The filesystem path of the config file."""
        return self._path

    @property
    def config(self) -> Config:
        """The in-memory config, loaded from disk on first access."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> Config:
        """(Re)load the config from disk.

        Returns:
            The loaded :class:`Config`, or a default instance when the file
            does not exist yet.

        Raises:
            ConfigurationError: If the file exists but is unreadable, is not
                valid JSON, or fails validation.
        """
        if not self._path.is_file():
            self._config = Config()
            return self._config
        try:
            text = self._path.read_text(encoding="utf-8")
            self._config = Config.model_validate(json.loads(text))
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
            raise ConfigurationError(f"Invalid config file at {self._path}: {exc}") from exc
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config file {self._path}: {exc}") from exc
        return self._config

    def save(self, config: Optional[Config] = None) -> None:
        """Persist the config atomically with ``0o600`` permissions.

        Args:
            config: Replace the in-memory config with this one before
                saving. When omitted the current in-memory config is written.

        Raises:
            ConfigurationError: If the file cannot be written.
        """
        if config is not None:
            self._config = config
        data = self.config.model_dump(mode="json")
        try:
            atomic_write(self._path, json.dumps(data, indent=2) + "\n")
        except OSError as exc:
            raise ConfigurationError(f"Failed to save config to {self._path}: {exc}") from exc

    def is_authenticated(self) -> bool:
        """Return ``True`` when both an access and a refresh token are stored."""
        return self.config.is_authenticated()

    def clear_auth(self) -> None:
        """Wipe the stored tokens in memory. Call :meth:`save` to persist."""
        self.config.clear_auth()

    def update_tokens(self, access_token: str, refresh_token: str, user_email: str) -> None:
        """Replace the token pair in memory. Call :meth:`save` to persist."""
        self.config.update_tokens(access_token, refresh_token, user_email)
