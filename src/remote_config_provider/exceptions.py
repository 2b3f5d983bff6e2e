"""Exceptions raised by remote-config-provider."""

from __future__ import annotations


class RemoteConfigProviderError(Exception):
    """Base class for all errors raised by this package."""


class OptionsValidationError(RemoteConfigProviderError, ValueError):
    """Backend options failed their self-check; no manager was built."""


class ConstructionError(RemoteConfigProviderError):
    """A backend factory could not build its manager or client."""


class NotRegisteredError(RemoteConfigProviderError, LookupError):
    """No manager is registered (or resolvable) for a provider id."""

    def __init__(self, provider_id: str, detail: str | None = None) -> None:
        """Initialize with the provider id that failed to resolve.

        Args:
            provider_id (str): The provider id that was looked up.
            detail (str | None): Extra context appended to the message.
        """
        self.provider_id = provider_id
        message = f"provider {provider_id} not registered"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FetchError(RemoteConfigProviderError):
    """The remote content source failed (network, not found, permission, bad payload)."""


class TypeMismatchError(RemoteConfigProviderError, TypeError):
    """A convenience registration function received options of the wrong type."""


__all__ = [
    "ConstructionError",
    "FetchError",
    "NotRegisteredError",
    "OptionsValidationError",
    "RemoteConfigProviderError",
    "TypeMismatchError",
]
