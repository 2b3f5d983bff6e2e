"""Remote configuration backends."""

from remote_config_provider.backends.base import ConfigManager, ManagerOptions, PollingConfigManager
from remote_config_provider.backends.github_backend import GitHubConfigManager, GitHubOptions
from remote_config_provider.backends.http_backend import HTTPConfigManager, HTTPOptions

__all__ = [
    "ConfigManager",
    "GitHubConfigManager",
    "GitHubOptions",
    "HTTPConfigManager",
    "HTTPOptions",
    "ManagerOptions",
    "PollingConfigManager",
]
