import os
import sys
from collections.abc import Generator

# Settings singletons are built at import time, so test values must be in place first
for _var in [name for name in os.environ if name.startswith("REMOTE_CONFIG_PROVIDER_")]:
    del os.environ[_var]

import pytest
from loguru import logger
from pytest import LogCaptureFixture

from remote_config_provider import ProviderRegistry, RemoteConfigHost


@pytest.fixture
def caplog(caplog: LogCaptureFixture) -> Generator[LogCaptureFixture, None, None]:
    """Fixture to capture log messages during tests.

    See https://loguru.readthedocs.io/en/stable/resources/migration.html#migration-caplog for more information.
    """
    handler_id = logger.add(caplog.handler, format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Set up logging for tests."""
    logger.remove()
    logger.configure(
        handlers=[
            {
                "sink": sys.stderr,
                "level": "DEBUG",
                "format": "{time:YYYY-MM-DD HH:mm:ss} | {name}:{function}:{line} | {level} | {message}",
            },
        ],
    )


@pytest.fixture
def registry() -> ProviderRegistry:
    """An isolated registry, so tests never touch the process default."""
    return ProviderRegistry()


@pytest.fixture
def host() -> RemoteConfigHost:
    """An isolated host with the default supported providers."""
    return RemoteConfigHost()
