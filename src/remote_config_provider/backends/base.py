"""Abstract contracts for remote configuration backends and the shared polling engine."""

from __future__ import annotations

import itertools
import queue
import threading
from abc import ABC, abstractmethod

from loguru import logger
from pydantic import BaseModel, ConfigDict

from remote_config_provider import remote_config_provider_settings
from remote_config_provider.exceptions import FetchError, OptionsValidationError
from remote_config_provider.models import FetchResult, Snapshot


class ManagerOptions(BaseModel, ABC):
    """Backend-specific configuration record with a self-check.

    Fields default to empty values so that an incomplete record can still be built and then rejected by
    `validate_options()`, which the registry calls exactly once before any manager is constructed.
    """

    model_config = ConfigDict(extra="forbid")

    polling_interval: float | None = None
    """Seconds between watch polls. None or 0 means the package default (60 seconds)."""

    @abstractmethod
    def validate_options(self) -> None:
        """Check that every field the backend needs to authenticate and locate its object is present.

        This must be a pure check with no side effects.

        Raises:
            OptionsValidationError: If any required field is missing or malformed.
        """

    def _validate_polling_interval(self) -> None:
        if self.polling_interval is not None and self.polling_interval < 0:
            raise OptionsValidationError(f"polling_interval must not be negative, got {self.polling_interval}")


class ConfigManager(ABC):
    """The capability every backend exposes to the registry and the bridge."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Fetch the current remote content once.

        Args:
            key: The key requested by the host. Managers are bound to one object by their options, so the
                value is only informational.

        Returns:
            bytes: The raw content.

        Raises:
            FetchError: If the remote content source fails.
        """

    @abstractmethod
    def watch(self, key: str, stop: threading.Event) -> queue.Queue[Snapshot]:
        """Start watching the remote content until `stop` is set.

        Args:
            key: The key requested by the host (informational, see `get`).
            stop: Set this event to end the watch.

        Returns:
            queue.Queue[Snapshot]: The queue snapshots are emitted on. It is never closed.
        """

    def close(self) -> None:
        """Release resources held by the manager. Managers holding none keep this no-op."""


class PollingConfigManager(ConfigManager):
    """A manager that detects remote changes by polling and comparing validation tokens.

    Subclasses implement `_fetch`, which returns the content together with an opaque validation token
    (ETag, Last-Modified or a digest). The watch loop is:

    1. Fetch immediately and emit the result unconditionally.
    2. Wait `polling_interval` seconds, then fetch again:
        - on failure, emit a failed snapshot, keep the stored token and fetch again after
          `error_backoff_seconds` instead of `polling_interval`;
        - on success with a token different from the stored one (or none stored yet), emit the content
          and store the new token;
        - on success with the same token, emit nothing.
    3. Exit as soon as `stop` is set. Waits are interruptible; an in-flight fetch is not, but its result
       is discarded once `stop` is set.

    Each `watch` call runs its own daemon thread with its own token. Tokens are never shared between
    watch loops.
    """

    _watcher_ids = itertools.count(1)

    def __init__(
        self,
        *,
        polling_interval: float | None = None,
        error_backoff_seconds: float | None = None,
    ) -> None:
        """Initialize the polling schedule.

        Args:
            polling_interval: Seconds between polls. None or 0 applies the package default.
            error_backoff_seconds: Delay after a failed poll. None applies the package default.
        """
        self.polling_interval = polling_interval or remote_config_provider_settings.default_polling_interval_seconds
        self.error_backoff_seconds = (
            error_backoff_seconds
            if error_backoff_seconds is not None
            else remote_config_provider_settings.error_backoff_seconds
        )

        self._watchers_lock = threading.Lock()
        self._watcher_threads: list[threading.Thread] = []

    @property
    @abstractmethod
    def location(self) -> str:
        """Human readable location of the watched object, used in logs and error messages."""

    @abstractmethod
    def _fetch(self, previous_token: str | None) -> FetchResult | None:
        """Retrieve the watched object from the remote source.

        Args:
            previous_token: The token of the last successful fetch in this watch loop, if any. Backends
                that support conditional requests may use it and return None when the remote reports the
                object as not modified.

        Returns:
            FetchResult | None: The content and its token, or None if the object is known to be unchanged.
        """

    def _fetch_checked(self, previous_token: str | None) -> FetchResult | None:
        try:
            return self._fetch(previous_token)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(f"Failed to fetch {self.location}: {e}") from e

    def get(self, key: str) -> bytes:
        """Fetch the current content of the configured object once, without retrying."""
        logger.trace(f"get({key!r}) resolved to {self.location}")
        result = self._fetch_checked(None)
        if result is None:
            raise FetchError(f"{self.location} returned no content for an unconditional fetch")
        return result.content

    def watch(self, key: str, stop: threading.Event) -> queue.Queue[Snapshot]:
        """Start a polling thread for the configured object and return its snapshot queue."""
        snapshots: queue.Queue[Snapshot] = queue.Queue()
        thread = threading.Thread(
            target=self._poll_loop,
            args=(snapshots, stop),
            daemon=True,
            name=f"{type(self).__name__}-watch-{next(self._watcher_ids)}",
        )
        with self._watchers_lock:
            self._watcher_threads = [t for t in self._watcher_threads if t.is_alive()]
            self._watcher_threads.append(thread)
        thread.start()
        logger.debug(f"Watching {self.location} every {self.polling_interval}s ({thread.name})")
        return snapshots

    @property
    def watcher_threads(self) -> list[threading.Thread]:
        """Threads started by `watch` on this manager that are still running."""
        with self._watchers_lock:
            return [t for t in self._watcher_threads if t.is_alive()]

    def join_watchers(self, timeout: float | None = None) -> bool:
        """Wait for watch threads to exit after their stop events were set.

        Args:
            timeout: Maximum seconds to wait for each thread.

        Returns:
            bool: True if no watch thread is still running.
        """
        for thread in self.watcher_threads:
            thread.join(timeout)
        return not self.watcher_threads

    def _poll_loop(self, snapshots: queue.Queue[Snapshot], stop: threading.Event) -> None:
        token: str | None = None

        while not stop.is_set():
            logger.debug(f"Polling {self.location} for changes")
            try:
                result = self._fetch_checked(token)
            except FetchError as e:
                if stop.is_set():
                    break
                logger.warning(f"Poll of {self.location} failed, retrying in {self.error_backoff_seconds}s: {e}")
                snapshots.put(Snapshot.failed(e))
                if stop.wait(self.error_backoff_seconds):
                    break
                continue
            else:
                if stop.is_set():
                    break
                if result is not None and (token is None or result.token != token):
                    logger.info(f"Change detected at {self.location} (token {token!r} -> {result.token!r})")
                    snapshots.put(Snapshot.of(result.content))
                    token = result.token
                else:
                    logger.debug(f"No change at {self.location}")

            if stop.wait(self.polling_interval):
                break

        logger.debug(f"Stopped watching {self.location}")
