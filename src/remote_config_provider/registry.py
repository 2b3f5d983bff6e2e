"""Process-wide table from provider id to its validated, constructed manager."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from threading import Lock
from types import MappingProxyType

from loguru import logger

from remote_config_provider.backends.base import ConfigManager, ManagerOptions
from remote_config_provider.exceptions import ConstructionError, NotRegisteredError, OptionsValidationError

Factory = Callable[[ManagerOptions], ConfigManager]
"""Builds a manager from validated options."""


@dataclass(frozen=True)
class ProviderRegistration:
    """The factory a provider was registered with and the manager it produced."""

    factory: Factory
    manager: ConfigManager


class ProviderRegistry:
    """Concurrency-safe registry of provider managers.

    The provider map is copy-on-write: a registration builds a new map and swaps it in under a lock, so
    lookups read a consistent snapshot without taking any lock and never see a half-built entry. Option
    validation and manager construction happen before the lock is taken, since factories may block on
    network calls.
    """

    def __init__(self) -> None:
        self._write_lock = Lock()
        self._providers: Mapping[str, ProviderRegistration] = MappingProxyType({})

    def register(
        self,
        provider_id: str,
        options: ManagerOptions,
        factory: Factory,
    ) -> ProviderRegistration:
        """Validate `options`, build a manager with `factory` and store it under `provider_id`.

        Any previous registration for `provider_id` is replaced and its manager closed once the new one is
        stored. Watches still running on the replaced manager should be stopped by their owners.

        Args:
            provider_id: The provider identifier, as the host will name it.
            options: Backend options. Validated before `factory` is called.
            factory: Builds the manager from `options`.

        Returns:
            ProviderRegistration: The stored registration.

        Raises:
            OptionsValidationError: If `options` fail validation. `factory` is not called.
            ConstructionError: If `factory` fails. Nothing is stored.
        """
        provider_id = str(provider_id)

        try:
            options.validate_options()
        except OptionsValidationError as e:
            logger.error(f"Invalid options for provider {provider_id}: {e}")
            raise OptionsValidationError(f"invalid options for provider {provider_id}: {e}") from e

        try:
            manager = factory(options)
        except Exception as e:
            logger.error(f"Failed to create manager for provider {provider_id}: {e}")
            raise ConstructionError(f"failed to create manager for provider {provider_id}: {e}") from e

        registration = ProviderRegistration(factory=factory, manager=manager)
        with self._write_lock:
            previous = self._providers.get(provider_id)
            self._providers = MappingProxyType({**self._providers, provider_id: registration})

        if previous is not None:
            logger.info(f"Replaced registration for provider {provider_id}")
            if previous.manager is not manager:
                self._close_replaced(provider_id, previous.manager)
        else:
            logger.info(f"Registered provider {provider_id}")
        return registration

    @staticmethod
    def _close_replaced(provider_id: str, manager: ConfigManager) -> None:
        try:
            manager.close()
        except Exception as e:
            logger.warning(f"Failed to close the replaced manager for provider {provider_id}: {e}")

    def is_registered(self, provider_id: str) -> bool:
        """Point-in-time check whether `provider_id` has a registration."""
        return str(provider_id) in self._providers

    def get_manager(self, provider_id: str) -> ConfigManager:
        """Return the manager registered under `provider_id`.

        Raises:
            NotRegisteredError: If nothing is registered under `provider_id`.
        """
        registration = self._providers.get(str(provider_id))
        if registration is None:
            raise NotRegisteredError(str(provider_id))
        return registration.manager

    def get_registration(self, provider_id: str) -> ProviderRegistration:
        """Return the full registration stored under `provider_id`.

        Raises:
            NotRegisteredError: If nothing is registered under `provider_id`.
        """
        registration = self._providers.get(str(provider_id))
        if registration is None:
            raise NotRegisteredError(str(provider_id))
        return registration

    def provider_ids(self) -> list[str]:
        """Return the registered provider ids, sorted."""
        return sorted(self._providers)

    def __contains__(self, provider_id: object) -> bool:
        return str(provider_id) in self._providers

    def __len__(self) -> int:
        return len(self._providers)


default_registry = ProviderRegistry()
"""The registry used by the module-level helpers and the default bridge."""


def register(provider_id: str, options: ManagerOptions, factory: Factory) -> ProviderRegistration:
    """Register a provider in the default registry. See `ProviderRegistry.register`."""
    return default_registry.register(provider_id, options, factory)


def is_registered(provider_id: str) -> bool:
    """Check the default registry. See `ProviderRegistry.is_registered`."""
    return default_registry.is_registered(provider_id)


def get_manager(provider_id: str) -> ConfigManager:
    """Look up the default registry. See `ProviderRegistry.get_manager`."""
    return default_registry.get_manager(provider_id)
