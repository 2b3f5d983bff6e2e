"""Remote, versioned configuration sources with change polling for host configuration libraries."""

from __future__ import annotations

from loguru import logger
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_config import LogLevel, configure_logger, disable_logging, enable_debug_logging
from .meta_consts import DEFAULT_ERROR_BACKOFF_SECONDS, DEFAULT_POLLING_INTERVAL_SECONDS


class RemoteConfigProviderSettings(BaseSettings):
    """Package-wide defaults, read from `REMOTE_CONFIG_PROVIDER_*` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_CONFIG_PROVIDER_",
        use_attribute_docstrings=True,
    )

    default_polling_interval_seconds: float = DEFAULT_POLLING_INTERVAL_SECONDS
    """Polling interval for managers whose options leave it unset or zero."""

    error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS
    """Delay after a failed poll before the watch loop resumes its regular schedule."""

    http_timeout_seconds: float = 10.0
    """Default timeout for HTTP requests made by the HTTP backend."""

    bridge_check_interval_seconds: float = 0.1
    """How often a watch-channel bridge checks for cancellation while no snapshot is pending."""

    log_level: LogLevel | None = None
    """If set, reconfigure loguru to this level on import. Left alone by default."""

    @model_validator(mode="after")
    def validate_timings(self) -> RemoteConfigProviderSettings:
        """Reject non-positive timings, which would turn watch loops into busy loops."""
        if self.default_polling_interval_seconds <= 0:
            logger.warning(
                f"default_polling_interval_seconds is {self.default_polling_interval_seconds}, but must be > 0. "
                f"Setting to {DEFAULT_POLLING_INTERVAL_SECONDS}."
            )
            self.default_polling_interval_seconds = DEFAULT_POLLING_INTERVAL_SECONDS

        if self.error_backoff_seconds < 0:
            logger.warning(f"error_backoff_seconds is {self.error_backoff_seconds}, but must be >= 0. Setting to 0.")
            self.error_backoff_seconds = 0.0

        if self.bridge_check_interval_seconds <= 0:
            raise ValueError("bridge_check_interval_seconds must be positive")

        return self


remote_config_provider_settings: RemoteConfigProviderSettings = RemoteConfigProviderSettings()

if remote_config_provider_settings.log_level is not None:
    configure_logger(remote_config_provider_settings.log_level)


from .exceptions import (  # noqa: E402, I001
    ConstructionError,
    FetchError,
    NotRegisteredError,
    OptionsValidationError,
    RemoteConfigProviderError,
    TypeMismatchError,
)
from .meta_consts import LegacyProviderType, ProviderType  # noqa: E402
from .models import FetchResult, RemoteProviderDescriptor, RemoteResponse, Snapshot  # noqa: E402
from .host import RemoteConfig, RemoteConfigHost, RemoteProvider, default_host  # noqa: E402
from .backends import (  # noqa: E402
    ConfigManager,
    GitHubConfigManager,
    GitHubOptions,
    HTTPConfigManager,
    HTTPOptions,
    ManagerOptions,
    PollingConfigManager,
)
from .registry import Factory, ProviderRegistration, ProviderRegistry, default_registry  # noqa: E402
from .bridge import LegacyManagerFactory, RemoteConfigBridge  # noqa: E402
from .remote import (  # noqa: E402
    default_bridge,
    register_github_provider,
    register_http_provider,
    register_provider,
    set_options,
)

__all__ = [
    "ConfigManager",
    "ConstructionError",
    "Factory",
    "FetchError",
    "FetchResult",
    "GitHubConfigManager",
    "GitHubOptions",
    "HTTPConfigManager",
    "HTTPOptions",
    "LegacyManagerFactory",
    "LegacyProviderType",
    "ManagerOptions",
    "NotRegisteredError",
    "OptionsValidationError",
    "PollingConfigManager",
    "ProviderRegistration",
    "ProviderRegistry",
    "ProviderType",
    "RemoteConfig",
    "RemoteConfigBridge",
    "RemoteConfigHost",
    "RemoteConfigProviderError",
    "RemoteConfigProviderSettings",
    "RemoteProvider",
    "RemoteProviderDescriptor",
    "RemoteResponse",
    "Snapshot",
    "TypeMismatchError",
    "configure_logger",
    "default_bridge",
    "default_host",
    "default_registry",
    "disable_logging",
    "enable_debug_logging",
    "register_github_provider",
    "register_http_provider",
    "register_provider",
    "remote_config_provider_settings",
    "set_options",
]
