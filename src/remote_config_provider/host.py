"""The host configuration library's remote-provider extension point.

A host (the library that parses and merges configuration) describes each remote source with a
`RemoteProvider` and asks a single installed `RemoteConfig` adapter to read or watch it. This module
defines that contract and a minimal `RemoteConfigHost` holding the host-side state this package touches:
the list of provider names the host accepts and the installed adapter.
"""

from __future__ import annotations

import queue
import threading
from threading import RLock
from typing import BinaryIO, Protocol, runtime_checkable

from loguru import logger

from remote_config_provider.meta_consts import HOST_DEFAULT_SUPPORTED_PROVIDERS
from remote_config_provider.models import RemoteResponse


@runtime_checkable
class RemoteProvider(Protocol):
    """Descriptor of one remote configuration source, as declared to the host."""

    @property
    def provider(self) -> str: ...

    @property
    def endpoint(self) -> str: ...

    @property
    def path(self) -> str: ...

    @property
    def secret_keyring(self) -> str: ...


class RemoteConfig(Protocol):
    """The three operations a host requires from its remote-config adapter."""

    def get(self, rp: RemoteProvider) -> BinaryIO: ...

    def watch(self, rp: RemoteProvider) -> BinaryIO: ...

    def watch_channel(self, rp: RemoteProvider) -> tuple[queue.Queue[RemoteResponse], threading.Event]: ...


class RemoteConfigHost:
    """Host-side registration state: accepted provider names and the installed adapter."""

    def __init__(self, supported_remote_providers: list[str] | None = None) -> None:
        self._lock = RLock()
        self.supported_remote_providers: list[str] = list(
            supported_remote_providers if supported_remote_providers is not None else HOST_DEFAULT_SUPPORTED_PROVIDERS
        )
        self.remote_config: RemoteConfig | None = None

    def add_supported_provider(self, provider_name: str) -> bool:
        """Add a provider name to the supported list unless it is already present.

        Returns:
            bool: True if the name was added.
        """
        with self._lock:
            if provider_name in self.supported_remote_providers:
                return False
            self.supported_remote_providers.append(provider_name)
            logger.debug(f"Host now accepts remote provider {provider_name!r}")
            return True

    def supports(self, provider_name: str) -> bool:
        with self._lock:
            return provider_name in self.supported_remote_providers

    def install_remote_config(self, remote_config: RemoteConfig) -> bool:
        """Install `remote_config` as the host adapter if none is installed yet.

        Returns:
            bool: True if this call installed the adapter.
        """
        with self._lock:
            if self.remote_config is not None:
                return False
            self.remote_config = remote_config
            logger.debug(f"Installed {type(remote_config).__name__} as the host remote-config adapter")
            return True


default_host = RemoteConfigHost()
"""The process-wide host state used when callers do not pass their own."""
