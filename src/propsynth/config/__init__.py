"""Application configuration helpers."""

from __future__ import annotations

from .entropy import EntropyThresholds, get_entropy_thresholds
from .env import env_flag, present_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "EntropyThresholds",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_database_config",
    "get_entropy_thresholds",
    "get_storage_config",
    "present_env_vars",
]
