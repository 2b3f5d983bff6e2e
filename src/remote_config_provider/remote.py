"""Application-facing registration API.

Registering a provider stores its manager in a registry, tells the host to accept the provider name, and
installs a `RemoteConfigBridge` as the host's remote-config adapter the first time a provider is registered.
"""

from __future__ import annotations

import warnings

from loguru import logger

from remote_config_provider.backends.base import ConfigManager, ManagerOptions
from remote_config_provider.backends.github_backend import GitHubConfigManager, GitHubOptions
from remote_config_provider.backends.http_backend import HTTPConfigManager, HTTPOptions
from remote_config_provider.bridge import RemoteConfigBridge
from remote_config_provider.exceptions import TypeMismatchError
from remote_config_provider.host import RemoteConfigHost, default_host
from remote_config_provider.meta_consts import ProviderType
from remote_config_provider.registry import Factory, ProviderRegistration, ProviderRegistry, default_registry

default_bridge = RemoteConfigBridge(default_registry)
"""The bridge installed on the default host, resolving from the default registry."""


def register_provider(
    provider_id: str,
    options: ManagerOptions,
    factory: Factory,
    *,
    registry: ProviderRegistry | None = None,
    host: RemoteConfigHost | None = None,
    bridge: RemoteConfigBridge | None = None,
) -> ProviderRegistration:
    """Register a provider and make it reachable from the host.

    Args:
        provider_id: The provider name the host will use.
        options: Backend options, validated before `factory` runs.
        factory: Builds the manager from `options`.
        registry: Registry to store the manager in. Defaults to the process registry.
        host: Host to update. Defaults to the process host.
        bridge: Adapter to install on the host if it has none. Defaults to a bridge over `registry`.

    Returns:
        ProviderRegistration: The stored registration.

    Raises:
        OptionsValidationError: If `options` fail validation.
        ConstructionError: If `factory` fails.
    """
    registry = registry if registry is not None else default_registry
    host = host if host is not None else default_host

    registration = registry.register(provider_id, options, factory)

    host.add_supported_provider(str(provider_id))
    if host.remote_config is None:
        if bridge is None:
            bridge = default_bridge if registry is default_registry else RemoteConfigBridge(registry)
        host.install_remote_config(bridge)

    return registration


def _github_factory(options: ManagerOptions) -> ConfigManager:
    if not isinstance(options, GitHubOptions):
        raise TypeMismatchError(f"invalid options type for github provider: {type(options).__name__}")
    return GitHubConfigManager(options)


def _http_factory(options: ManagerOptions) -> ConfigManager:
    if not isinstance(options, HTTPOptions):
        raise TypeMismatchError(f"invalid options type for http provider: {type(options).__name__}")
    return HTTPConfigManager(options)


def register_github_provider(
    options: GitHubOptions,
    *,
    registry: ProviderRegistry | None = None,
    host: RemoteConfigHost | None = None,
) -> ProviderRegistration:
    """Register a GitHub-backed provider under the `github` provider name.

    Raises:
        TypeMismatchError: If `options` is not a `GitHubOptions`.
        OptionsValidationError: If `options` fail validation.
        ConstructionError: If the GitHub client cannot be created.
    """
    if not isinstance(options, GitHubOptions):
        raise TypeMismatchError(f"invalid options type for github provider: {type(options).__name__}")
    return register_provider(ProviderType.github, options, _github_factory, registry=registry, host=host)


def register_http_provider(
    options: HTTPOptions,
    *,
    registry: ProviderRegistry | None = None,
    host: RemoteConfigHost | None = None,
) -> ProviderRegistration:
    """Register an HTTP(S)-backed provider under the `http` provider name.

    Raises:
        TypeMismatchError: If `options` is not an `HTTPOptions`.
        OptionsValidationError: If `options` fail validation.
        ConstructionError: If the manager cannot be created.
    """
    if not isinstance(options, HTTPOptions):
        raise TypeMismatchError(f"invalid options type for http provider: {type(options).__name__}")
    return register_provider(ProviderType.http, options, _http_factory, registry=registry, host=host)


def set_options(
    options: GitHubOptions,
    *,
    host: RemoteConfigHost | None = None,
    bridge: RemoteConfigBridge | None = None,
) -> GitHubConfigManager:
    """Serve `github` descriptors from a manager built from `options`, bypassing the registry.

    Deprecated: use `register_github_provider`. A `github` provider in the registry takes precedence over a
    manager set here.

    Returns:
        GitHubConfigManager: The pinned manager.

    Raises:
        OptionsValidationError: If `options` fail validation. Nothing is pinned.
        ConstructionError: If the GitHub client cannot be created.
    """
    warnings.warn(
        "set_options is deprecated. Use register_github_provider instead.",
        DeprecationWarning,
        stacklevel=2,
    )
    host = host if host is not None else default_host
    bridge = bridge if bridge is not None else default_bridge

    options.validate_options()
    manager = GitHubConfigManager(options)
    bridge.pin_github_manager(manager)
    logger.debug(f"Pinned GitHub manager for {manager.location} outside the registry")

    host.add_supported_provider(str(ProviderType.github))
    host.install_remote_config(bridge)
    return manager
