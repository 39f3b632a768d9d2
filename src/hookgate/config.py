"""Application configuration for hookgate.

Defines configuration models for the server, admin credential, forwarding,
history, storage and logging. User creates config via `hookgate init`.
Config is stored at the OS-appropriate location (via click.get_app_dir);
HOOKGATE_* environment variables override individual values at load time.

Example usage:
    # Load from config file (defaults when missing) plus environment
    config = load_config()

    # Save new configuration
    config.save_to_file(get_config_path())
"""

from __future__ import annotations

__all__ = [
    "AdminConfig",
    "AppConfig",
    "ForwardingConfig",
    "HistoryConfig",
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    "apply_env_overrides",
    "get_config_path",
    "load_config",
]

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from hookgate.constants import (
    CONFIG_FILENAME,
    DEFAULT_DATA_DIR,
    DEFAULT_FORWARD_TIMEOUT_SECONDS,
    DEFAULT_HISTORY_FILENAME,
    DEFAULT_HISTORY_MAX,
    DEFAULT_HOST,
    DEFAULT_LOG_DIR,
    DEFAULT_MAX_BODY_BYTES,
    DEFAULT_PORT,
    DEFAULT_ROUTES_FILENAME,
    DEFAULT_WATCH_INTERVAL_SECONDS,
    ENV_PREFIX,
    SYSTEM_LOG_FILENAME,
)
from hookgate.exceptions import ConfigurationError
from hookgate.utils.file_helpers import (
    get_app_dir,
    load_validated_json,
    require_file_exists,
    set_secure_permissions,
)

# Values of HOOKGATE_TIMEOUT that disable the downstream timeout
_TIMEOUT_DISABLED_VALUES = frozenset({"", "none", "off", "0"})


class ServerConfig(BaseModel):
    """Listening address of the gateway.

    Attributes:
        host: Interface to bind.
        port: TCP port to bind.
    """

    host: str = Field(default=DEFAULT_HOST, min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)


class AdminConfig(BaseModel):
    """Admin API credential.

    Attributes:
        token: Shared secret for the admin endpoints. When unset, every
            admin request is accepted.
    """

    token: str | None = None

    @field_validator("token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ForwardingConfig(BaseModel):
    """Forwarding behavior.

    Attributes:
        allowlist: Destination hostnames permitted as forwarding targets.
            Empty means unrestricted. Accepts a list or a comma-separated
            string; entries are stored lowercased.
        timeout_seconds: Per-phase downstream timeout (connect, read, write,
            pool). None disables it.
        max_body_bytes: Largest inbound request body accepted.
    """

    allowlist: list[str] = Field(default_factory=list)
    timeout_seconds: float | None = Field(default=DEFAULT_FORWARD_TIMEOUT_SECONDS, gt=0)
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_BYTES, ge=1)

    @field_validator("allowlist", mode="before")
    @classmethod
    def _normalize_allowlist(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set, frozenset)):
            return [str(host).strip().lower() for host in value if str(host).strip()]
        return value


class HistoryConfig(BaseModel):
    """History ledger settings.

    Attributes:
        max_per_key: In-memory entries kept per route key.
    """

    max_per_key: int = Field(default=DEFAULT_HISTORY_MAX, ge=1)


class StorageConfig(BaseModel):
    """Durable storage locations.

    Relative file names resolve against data_dir.

    Attributes:
        data_dir: Directory holding the routes file and history log.
        routes_file: Route table JSON file.
        history_file: Append-only JSONL history log.
        watch_interval_seconds: Poll interval for external edits to the
            routes file. 0 disables the watcher.
    """

    data_dir: str = Field(default=DEFAULT_DATA_DIR, min_length=1)
    routes_file: str = Field(default=DEFAULT_ROUTES_FILENAME, min_length=1)
    history_file: str = Field(default=DEFAULT_HISTORY_FILENAME, min_length=1)
    watch_interval_seconds: float = Field(default=DEFAULT_WATCH_INTERVAL_SECONDS, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Attributes:
        log_dir: Directory for system.jsonl.
        log_level: DEBUG also writes INFO records to the system log file.
    """

    log_dir: str = Field(default=DEFAULT_LOG_DIR, min_length=1)
    log_level: Literal["DEBUG", "INFO"] = "INFO"


class AppConfig(BaseModel):
    """Main hookgate configuration.

    Attributes:
        server: Listening address.
        admin: Admin API credential.
        forwarding: Allowlist, timeout and body limit.
        history: History ledger settings.
        storage: Routes file and history log locations.
        logging: System log settings.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    forwarding: ForwardingConfig = Field(default_factory=ForwardingConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def _storage_path(self, name: str) -> Path:
        path = Path(name).expanduser()
        if path.is_absolute():
            return path
        return Path(self.storage.data_dir).expanduser() / path

    @property
    def routes_path(self) -> Path:
        """Resolved path of the routes JSON file."""
        return self._storage_path(self.storage.routes_file)

    @property
    def history_path(self) -> Path:
        """Resolved path of the JSONL history log."""
        return self._storage_path(self.storage.history_file)

    @property
    def system_log_path(self) -> Path:
        """Resolved path of system.jsonl."""
        return Path(self.logging.log_dir).expanduser() / SYSTEM_LOG_FILENAME

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file.

        Creates parent directories if they don't exist. The file may hold
        the admin token, so it is written owner-only (0o600).

        Args:
            config_path: Path where the config JSON file should be saved.
        """
        config_path.parent.mkdir(parents=True, exist_ok=True)
        set_secure_permissions(config_path.parent, is_directory=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
            f.write("\n")

        set_secure_permissions(config_path)

    @classmethod
    def load_from_files(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.

        Returns:
            AppConfig instance with loaded configuration.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config file is invalid.
        """
        require_file_exists(config_path, file_type="configuration")
        return load_validated_json(
            config_path,
            cls,
            file_type="config",
            recovery_hint="Run 'hookgate init --force' to reconfigure.",
        )


def get_config_path() -> Path:
    """Get the config file path.

    HOOKGATE_CONFIG overrides the default location inside the app directory.
    """
    override = os.environ.get(f"{ENV_PREFIX}CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    return get_app_dir() / CONFIG_FILENAME


def _parse_timeout(raw: str) -> float | None:
    if raw.strip().lower() in _TIMEOUT_DISABLED_VALUES:
        return None
    return float(raw)


def apply_env_overrides(config: AppConfig, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Return a copy of config with HOOKGATE_* environment overrides applied.

    Supported variables:
        HOOKGATE_HOST, HOOKGATE_PORT, HOOKGATE_ADMIN_TOKEN,
        HOOKGATE_ALLOWLIST (comma-separated), HOOKGATE_HISTORY_MAX,
        HOOKGATE_DATA_DIR, HOOKGATE_TIMEOUT ("none" disables)

    Args:
        config: Base configuration (usually loaded from file).
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        New validated AppConfig.

    Raises:
        ConfigurationError: If an override has an invalid value.
    """
    env = os.environ if environ is None else environ
    data = config.model_dump(mode="json")

    overrides: list[tuple[str, str, str]] = [
        ("HOST", "server", "host"),
        ("PORT", "server", "port"),
        ("ADMIN_TOKEN", "admin", "token"),
        ("ALLOWLIST", "forwarding", "allowlist"),
        ("HISTORY_MAX", "history", "max_per_key"),
        ("DATA_DIR", "storage", "data_dir"),
        ("TIMEOUT", "forwarding", "timeout_seconds"),
    ]

    for suffix, section, field in overrides:
        name = f"{ENV_PREFIX}{suffix}"
        if name not in env:
            continue
        raw = env[name]
        if field == "timeout_seconds":
            try:
                data[section][field] = _parse_timeout(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid {name}={raw!r}: expected seconds or 'none'") from e
        else:
            data[section][field] = raw

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise ConfigurationError(f"Invalid {ENV_PREFIX}* environment override: {details}") from e


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load config from file (defaults if the file is missing), then apply env overrides.

    Args:
        config_path: Config file. Defaults to get_config_path().
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Effective AppConfig.

    Raises:
        ConfigurationError: If the file or an override is invalid.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            config = AppConfig.load_from_files(path)
        except (FileNotFoundError, ValueError) as e:
            raise ConfigurationError(str(e)) from e
    else:
        config = AppConfig()

    return apply_env_overrides(config, environ)
