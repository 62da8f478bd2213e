"""Configuration loading for quotesync."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError
from .sync.remote_source import DEFAULT_REMOTE_URL, SENTINEL_CATEGORY
from .sync.resolution import RESOLUTION_POLICIES


@dataclass
class StorageConfig:
    db_path: str = "~/.quotesync/quotes.db"


@dataclass
class RemoteConfig:
    """Configuration for the remote quote endpoint."""

    url: str = DEFAULT_REMOTE_URL
    timeout: float = 10.0
    max_retries: int = 3
    text_field: str = "title"
    sentinel_category: str = SENTINEL_CATEGORY
    fetch_limit: int | None = None
    user_id: int = 1


@dataclass
class SyncConfig:
    """Configuration for periodic sync."""

    enabled: bool = True
    interval_seconds: float = 30.0
    resolution: str = "prompt"  # "prompt", "accept" or "decline"


@dataclass
class TransferConfig:
    strict_import: bool = True
    export_path: str = "quotes.json"


@dataclass
class NotificationsConfig:
    duration_seconds: float = 3.0


@dataclass
class Config:
    storage: StorageConfig = field(default_factory=StorageConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    transfer: TransferConfig = field(default_factory=TransferConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with QUOTESYNC_ prefix."""
    return os.environ.get(f"QUOTESYNC_{key}", default)


def _as_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _as_number(key: str, value: str, kind: type) -> Any:
    """Convert an environment value, naming the variable on failure."""
    try:
        return kind(value)
    except ValueError as e:
        raise ConfigurationError(
            f"QUOTESYNC_{key} must be {kind.__name__}, got {value!r}"
        ) from e


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    # Storage overrides
    if db_path := _get_env("DB_PATH"):
        config.storage.db_path = db_path

    # Remote overrides
    if url := _get_env("REMOTE_URL"):
        config.remote.url = url
    if timeout := _get_env("REMOTE_TIMEOUT"):
        config.remote.timeout = _as_number("REMOTE_TIMEOUT", timeout, float)
    if max_retries := _get_env("REMOTE_MAX_RETRIES"):
        config.remote.max_retries = _as_number("REMOTE_MAX_RETRIES", max_retries, int)

    # Sync overrides
    if sync_enabled := _get_env("SYNC_ENABLED"):
        config.sync.enabled = _as_bool(sync_enabled)
    if interval := _get_env("SYNC_INTERVAL"):
        config.sync.interval_seconds = _as_number("SYNC_INTERVAL", interval, float)
    if resolution := _get_env("SYNC_RESOLUTION"):
        config.sync.resolution = resolution

    # Import strictness
    if strict := _get_env("STRICT_IMPORT"):
        config.transfer.strict_import = _as_bool(strict)

    return config


def _validate(config: Config) -> None:
    """Reject values the rest of the system cannot use."""
    if config.sync.resolution not in RESOLUTION_POLICIES:
        raise ConfigurationError(
            f"sync.resolution must be one of {RESOLUTION_POLICIES}, "
            f"got {config.sync.resolution!r}"
        )
    if config.sync.interval_seconds <= 0:
        raise ConfigurationError("sync.interval_seconds must be positive")
    if config.remote.max_retries < 1:
        raise ConfigurationError("remote.max_retries must be at least 1")
    if config.remote.fetch_limit is not None and config.remote.fetch_limit < 0:
        raise ConfigurationError("remote.fetch_limit must not be negative")


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default config.

    Returns:
        Loaded and validated Config object.

    Raises:
        ConfigurationError: If a setting has an unusable value.
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

            # Parse storage config
            if "storage" in data:
                config.storage = StorageConfig(
                    db_path=data["storage"].get("db_path", config.storage.db_path)
                )

            # Parse remote config
            if "remote" in data:
                remote_data = data["remote"]
                config.remote = RemoteConfig(
                    url=remote_data.get("url", config.remote.url),
                    timeout=remote_data.get("timeout", config.remote.timeout),
                    max_retries=remote_data.get(
                        "max_retries", config.remote.max_retries
                    ),
                    text_field=remote_data.get("text_field", config.remote.text_field),
                    sentinel_category=remote_data.get(
                        "sentinel_category", config.remote.sentinel_category
                    ),
                    fetch_limit=remote_data.get(
                        "fetch_limit", config.remote.fetch_limit
                    ),
                    user_id=remote_data.get("user_id", config.remote.user_id),
                )

            # Parse sync config
            if "sync" in data:
                sync_data = data["sync"]
                config.sync = SyncConfig(
                    enabled=sync_data.get("enabled", config.sync.enabled),
                    interval_seconds=sync_data.get(
                        "interval_seconds", config.sync.interval_seconds
                    ),
                    resolution=sync_data.get("resolution", config.sync.resolution),
                )

            # Parse transfer config
            if "transfer" in data:
                transfer_data = data["transfer"]
                config.transfer = TransferConfig(
                    strict_import=transfer_data.get(
                        "strict_import", config.transfer.strict_import
                    ),
                    export_path=transfer_data.get(
                        "export_path", config.transfer.export_path
                    ),
                )

            # Parse notifications config
            if "notifications" in data:
                config.notifications = NotificationsConfig(
                    duration_seconds=data["notifications"].get(
                        "duration_seconds", config.notifications.duration_seconds
                    )
                )

    # Apply environment variable overrides
    config = _apply_env_overrides(config)

    _validate(config)
    return config
