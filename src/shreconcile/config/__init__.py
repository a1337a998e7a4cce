"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_or_default, require_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .feeds import FeedConfig, FeedSource, get_feed_config
from .run import DEFAULT_TOUCH_BATCH_SIZE, RunConfig, get_run_config
from .storage import (
    DESTINATION_PREFIX,
    FIRST_SOURCE_PREFIX,
    SECOND_SOURCE_PREFIX,
    DatabaseConfig,
    get_database_config,
)

__all__ = [
    "DEFAULT_TOUCH_BATCH_SIZE",
    "DESTINATION_PREFIX",
    "FIRST_SOURCE_PREFIX",
    "SECOND_SOURCE_PREFIX",
    "ConfigurationError",
    "DatabaseConfig",
    "FeedConfig",
    "FeedSource",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RunConfig",
    "env_flag",
    "env_or_default",
    "get_database_config",
    "get_feed_config",
    "get_run_config",
    "require_env_var",
    "require_env_vars",
]
