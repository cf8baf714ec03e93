"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_float, env_int, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .filscan import FilscanConfig, get_filscan_config
from .http_resilience import RateLimit, ResilienceConfig, RetryablePayloadError, RetryPolicy
from .logging import configure_logging
from .lotus import LotusConfig, get_lotus_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .tracking import DealTrackingConfig, get_tracking_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "DealTrackingConfig",
    "FilscanConfig",
    "LotusConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "RetryablePayloadError",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "get_database_config",
    "get_filscan_config",
    "get_lotus_config",
    "get_storage_config",
    "get_tracking_config",
    "require_env_var",
    "require_env_vars",
]
