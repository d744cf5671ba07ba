"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_float_env, optional_int_env, require_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .feed import FeedConfig, get_feed_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging, redact_url, register_secret
from .media import MediaConfig, get_media_config
from .run import RunLimits, get_run_limits
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "FeedConfig",
    "InvalidConfigurationError",
    "MediaConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "RunLimits",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_feed_config",
    "get_media_config",
    "get_run_limits",
    "get_storage_config",
    "optional_float_env",
    "optional_int_env",
    "redact_url",
    "register_secret",
    "require_env_var",
    "require_env_vars",
]
