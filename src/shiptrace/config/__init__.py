"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .tracking import TrackingConfig, get_tracking_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "TrackingConfig",
    "configure_logging",
    "get_database_config",
    "get_storage_config",
    "get_tracking_config",
    "optional_int",
    "require_env_vars",
]
