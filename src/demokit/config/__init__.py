"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, SourceNotFoundError
from .github import GitHubConfig, get_github_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .importer import ImportSettings, get_import_settings, resolve_source_path
from .logging import configure_logging
from .mattermost import MattermostConfig, get_mattermost_config
from .storage import StorageConfig, get_http_cache_path, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "GitHubConfig",
    "ImportSettings",
    "MattermostConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceNotFoundError",
    "StorageConfig",
    "configure_logging",
    "get_github_config",
    "get_http_cache_path",
    "get_import_settings",
    "get_mattermost_config",
    "get_storage_config",
    "require_env_vars",
    "resolve_source_path",
]
