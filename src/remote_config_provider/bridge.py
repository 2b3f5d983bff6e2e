"""Adapter between registered managers and the host's remote-config contract."""

from __future__ import annotations

import io
import queue
import threading
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from remote_config_provider import remote_config_provider_settings
from remote_config_provider.backends.base import ConfigManager
from remote_config_provider.exceptions import NotRegisteredError
from remote_config_provider.host import RemoteProvider
from remote_config_provider.meta_consts import LEGACY_ENDPOINT_SEPARATOR, LegacyProviderType, ProviderType
from remote_config_provider.models import RemoteResponse, Snapshot
from remote_config_provider.registry import ProviderRegistry

LegacyManagerFactory = Callable[[LegacyProviderType, list[str], bytes | None], ConfigManager]
"""Builds a manager for a legacy key/value store from its kind, endpoint list and optional secret keyring."""


class RemoteConfigBridge:
    """Implements the host's `get` / `watch` / `watch_channel` on top of a provider registry.

    Managers are resolved in this order:

    1. the manager registered under the descriptor's provider name;
    2. for `github`, a manager pinned with `pin_github_manager` (the deprecated `set_options` path);
    3. a legacy key/value store manager built by `legacy_factory`, if one was supplied.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        legacy_factory: LegacyManagerFactory | None = None,
        check_interval_seconds: float | None = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            registry: The registry to resolve providers from.
            legacy_factory: Builds managers for providers that are not registered. None disables the
                legacy fallback.
            check_interval_seconds: How often a watch-channel bridge thread checks for cancellation while no
                snapshot is pending. None applies the package default.
        """
        self.registry = registry
        self.legacy_factory = legacy_factory
        self.check_interval_seconds = (
            check_interval_seconds or remote_config_provider_settings.bridge_check_interval_seconds
        )
        self._pinned_github_manager: ConfigManager | None = None

    def pin_github_manager(self, manager: ConfigManager | None) -> None:
        """Serve `github` descriptors from `manager` when no `github` provider is registered."""
        self._pinned_github_manager = manager

    def get(self, rp: RemoteProvider) -> io.BytesIO:
        """Fetch the descriptor's content once.

        Raises:
            NotRegisteredError: If no manager can be resolved.
            FetchError: If the fetch fails.
        """
        manager = self.resolve_manager(rp)
        return io.BytesIO(manager.get(rp.path))

    def watch(self, rp: RemoteProvider) -> io.BytesIO:
        """Fetch the descriptor's content once; the host calls this when re-reading a watched provider."""
        manager = self.resolve_manager(rp)
        return io.BytesIO(manager.get(rp.path))

    def watch_channel(self, rp: RemoteProvider) -> tuple[queue.Queue[RemoteResponse], threading.Event]:
        """Watch the descriptor's content continuously.

        Returns:
            tuple[queue.Queue[RemoteResponse], threading.Event]: The response queue and the event the host
            sets to cancel the watch. If no manager can be resolved, the queue holds a single error response
            and the event is not connected to anything.
        """
        responses: queue.Queue[RemoteResponse] = queue.Queue()
        quit_event = threading.Event()

        try:
            manager = self.resolve_manager(rp)
        except Exception as e:
            logger.error(f"Cannot watch {rp.provider}:{rp.path}: {e}")
            responses.put(RemoteResponse(error=e))
            return responses, quit_event

        stop_event = threading.Event()
        snapshots = manager.watch(rp.path, stop_event)

        thread = threading.Thread(
            target=self._forward,
            args=(snapshots, responses, quit_event, stop_event),
            daemon=True,
            name=f"RemoteConfigBridge-{rp.provider}",
        )
        thread.start()
        return responses, quit_event

    def _forward(
        self,
        snapshots: queue.Queue[Snapshot],
        responses: queue.Queue[RemoteResponse],
        quit_event: threading.Event,
        stop_event: threading.Event,
    ) -> None:
        while not quit_event.is_set():
            try:
                snapshot = snapshots.get(timeout=self.check_interval_seconds)
            except queue.Empty:
                continue
            if quit_event.is_set():
                break
            responses.put(RemoteResponse.from_snapshot(snapshot))

        stop_event.set()
        logger.debug("Watch channel cancelled by host")

    def resolve_manager(self, rp: RemoteProvider) -> ConfigManager:
        """Find the manager serving `rp`.

        Raises:
            NotRegisteredError: If the provider is not registered and no fallback applies.
        """
        provider_name = rp.provider

        if self.registry.is_registered(provider_name):
            return self.registry.get_manager(provider_name)

        if provider_name == ProviderType.github and self._pinned_github_manager is not None:
            return self._pinned_github_manager

        return self._legacy_manager(rp)

    def _legacy_manager(self, rp: RemoteProvider) -> ConfigManager:
        if self.legacy_factory is None:
            raise NotRegisteredError(rp.provider, "no legacy backend factory configured")

        kind = LegacyProviderType.resolve(rp.provider)
        endpoints = rp.endpoint.split(LEGACY_ENDPOINT_SEPARATOR)
        keyring: bytes | None = None
        if rp.secret_keyring:
            keyring = Path(rp.secret_keyring).read_bytes()

        logger.debug(f"Falling back to legacy {kind} backend for provider {rp.provider!r} at {endpoints}")
        return self.legacy_factory(kind, endpoints, keyring)
