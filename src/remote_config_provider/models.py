"""Immutable value types exchanged between backends, the registry and the host."""

from __future__ import annotations

from dataclasses import dataclass

from remote_config_provider.meta_consts import ProviderType


@dataclass(frozen=True)
class FetchResult:
    """Raw content of the watched object plus the validation token it was served with."""

    content: bytes
    token: str
    """Opaque comparator (ETag, Last-Modified or a content digest). Only compared for equality."""


@dataclass(frozen=True)
class Snapshot:
    """One fetch result emitted on a manager's watch queue.

    Exactly one of `value` and `error` is set. A snapshot always carries the full content of the watched
    object at the time it was retrieved.
    """

    value: bytes | None = None
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("A Snapshot must carry exactly one of value or error.")

    @classmethod
    def of(cls, value: bytes) -> Snapshot:
        """Build a snapshot carrying content."""
        return cls(value=value)

    @classmethod
    def failed(cls, error: BaseException) -> Snapshot:
        """Build a snapshot carrying a fetch error."""
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """Whether this snapshot carries content."""
        return self.error is None


@dataclass(frozen=True)
class RemoteResponse:
    """The response shape the host configuration library reads from a watch channel."""

    value: bytes | None = None
    error: BaseException | None = None

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> RemoteResponse:
        return cls(value=snapshot.value, error=snapshot.error)


@dataclass(frozen=True)
class RemoteProviderDescriptor:
    """A host-side description of a remote provider: which backend, where, and which object."""

    provider: str
    endpoint: str
    path: str
    secret_keyring: str = ""

    @classmethod
    def default_github(cls) -> RemoteProviderDescriptor:
        """Return the descriptor hosts use for GitHub when nothing else is configured."""
        return cls(provider=str(ProviderType.github), endpoint="localhost", path="", secret_keyring="")
