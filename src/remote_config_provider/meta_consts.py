from __future__ import annotations

from enum import auto

from strenum import StrEnum


class ProviderType(StrEnum):
    """Well-known provider identifiers used as registry keys.

    Any string can be registered; these are the names the package knows about.
    `s3` and `gcs` have no bundled manager and must be registered with a custom factory.
    """

    github = auto()
    s3 = auto()
    gcs = auto()
    http = auto()


class LegacyProviderType(StrEnum):
    """The closed set of key/value stores reachable through the legacy fallback."""

    etcd = auto()
    etcd3 = auto()
    firestore = auto()
    nats = auto()
    consul = auto()

    @classmethod
    def resolve(cls, provider_name: str) -> LegacyProviderType:
        """Map a host provider name to a legacy backend kind.

        Unknown names resolve to `consul`, which is what the host library treats as its default store.

        Args:
            provider_name (str): The provider name declared by the host.

        Returns:
            LegacyProviderType: The matching legacy backend kind.
        """
        try:
            return cls(provider_name)
        except ValueError:
            return cls.consul


DEFAULT_POLLING_INTERVAL_SECONDS = 60.0
"""Polling interval applied by managers whose options leave it unset or zero."""

DEFAULT_ERROR_BACKOFF_SECONDS = 5.0
"""Fixed delay after a failed poll before the loop resumes its regular schedule."""

LEGACY_ENDPOINT_SEPARATOR = ";"
"""Separator between endpoints in a host descriptor's endpoint string."""

HOST_DEFAULT_SUPPORTED_PROVIDERS = [str(kind) for kind in LegacyProviderType]
"""Provider names a host accepts before any provider is registered."""
