import queue
import threading
import time
from collections.abc import Callable, Sequence

from typing_extensions import override

from remote_config_provider import (
    FetchResult,
    ManagerOptions,
    OptionsValidationError,
    PollingConfigManager,
    Snapshot,
)

ScriptStep = FetchResult | BaseException | None | Callable[[], FetchResult | None]

WAIT_TIMEOUT = 5.0


class StaticOptions(ManagerOptions):
    """Options for ScriptedManager; valid whenever `name` is set."""

    name: str = ""

    @override
    def validate_options(self) -> None:
        if not self.name:
            raise OptionsValidationError("name is required")
        self._validate_polling_interval()


class ScriptedManager(PollingConfigManager):
    """Polling manager replaying a fixed script of fetch outcomes.

    Each fetch consumes the next step; once the script is exhausted the last step repeats. A step may be a
    FetchResult, an exception to raise, None (not modified), or a callable producing one of those.
    """

    def __init__(
        self,
        script: Sequence[ScriptStep],
        *,
        polling_interval: float = 0.01,
        error_backoff_seconds: float = 0.0,
    ) -> None:
        super().__init__(polling_interval=polling_interval, error_backoff_seconds=error_backoff_seconds)
        if not script:
            raise ValueError("script must not be empty")
        self._script = list(script)
        self._lock = threading.Lock()
        self.calls = 0
        self.previous_tokens: list[str | None] = []
        self.exhausted = threading.Event()

    @property
    @override
    def location(self) -> str:
        return "scripted://config.yaml"

    @override
    def _fetch(self, previous_token: str | None) -> FetchResult | None:
        with self._lock:
            step = self._script[min(self.calls, len(self._script) - 1)]
            self.calls += 1
            self.previous_tokens.append(previous_token)
            if self.calls >= len(self._script):
                self.exhausted.set()

        if callable(step):
            step = step()
        if isinstance(step, BaseException):
            raise step
        return step


def result(content: str, token: str) -> FetchResult:
    return FetchResult(content=content.encode(), token=token)


def drain(snapshots: queue.Queue[Snapshot]) -> list[Snapshot]:
    """Return everything currently queued without blocking."""
    items: list[Snapshot] = []
    while True:
        try:
            items.append(snapshots.get_nowait())
        except queue.Empty:
            return items


def wait_for(condition: Callable[[], bool], timeout: float = WAIT_TIMEOUT) -> bool:
    """Poll `condition` until it holds or `timeout` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.005)
    return condition()


def run_until_exhausted(manager: ScriptedManager, extra_calls: int = 2) -> list[Snapshot]:
    """Watch `manager` until its script ran out plus `extra_calls` polls, then stop and collect snapshots."""
    stop = threading.Event()
    snapshots = manager.watch("config.yaml", stop)
    assert manager.exhausted.wait(WAIT_TIMEOUT), "script was not consumed in time"

    target = manager.calls + extra_calls
    assert wait_for(lambda: manager.calls >= target)

    stop.set()
    assert manager.join_watchers(WAIT_TIMEOUT)
    return drain(snapshots)
