"""HTTP backend: serves a configuration file from any HTTP(S) URL.

Polls are conditional requests. The validation token of the last successful response is sent back as
`If-None-Match` (ETag) or `If-Modified-Since` (Last-Modified), and a `304 Not Modified` answer counts as
unchanged without downloading the body.
"""

from __future__ import annotations

import hashlib
import urllib.parse

import httpx
from loguru import logger
from pydantic import Field
from typing_extensions import override

from remote_config_provider import remote_config_provider_settings
from remote_config_provider.backends.base import ManagerOptions, PollingConfigManager
from remote_config_provider.exceptions import FetchError, OptionsValidationError
from remote_config_provider.models import FetchResult

_ETAG_PREFIX = "etag:"
_LAST_MODIFIED_PREFIX = "last-modified:"
_DIGEST_PREFIX = "sha256:"


class HTTPOptions(ManagerOptions):
    """URL of a configuration file and how to request it."""

    url: str = ""
    """Absolute http:// or https:// URL of the configuration file."""

    headers: dict[str, str] = Field(default_factory=dict)
    """Extra request headers."""

    bearer_token: str | None = None
    """Sent as `Authorization: Bearer <token>` when set."""

    timeout_seconds: float | None = None
    """Request timeout. None means the package default."""

    @override
    def validate_options(self) -> None:
        if not self.url:
            raise OptionsValidationError("url is required")
        parsed = urllib.parse.urlparse(self.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise OptionsValidationError(f"url must be an absolute http(s) URL, got {self.url!r}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise OptionsValidationError(f"timeout_seconds must be positive, got {self.timeout_seconds}")
        self._validate_polling_interval()


def _token_from_response(response: httpx.Response) -> str:
    etag = response.headers.get("ETag")
    if etag:
        return _ETAG_PREFIX + etag
    last_modified = response.headers.get("Last-Modified")
    if last_modified:
        return _LAST_MODIFIED_PREFIX + last_modified
    return _DIGEST_PREFIX + hashlib.sha256(response.content).hexdigest()


def _conditional_headers(previous_token: str | None) -> dict[str, str]:
    if previous_token is None:
        return {}
    if previous_token.startswith(_ETAG_PREFIX):
        return {"If-None-Match": previous_token.removeprefix(_ETAG_PREFIX)}
    if previous_token.startswith(_LAST_MODIFIED_PREFIX):
        return {"If-Modified-Since": previous_token.removeprefix(_LAST_MODIFIED_PREFIX)}
    return {}


class HTTPConfigManager(PollingConfigManager):
    """Manager reading and watching one HTTP(S) resource."""

    def __init__(
        self,
        options: HTTPOptions,
        *,
        client: httpx.Client | None = None,
        error_backoff_seconds: float | None = None,
    ) -> None:
        """Bind the manager to the configured URL.

        Args:
            options: Validated HTTP options.
            client: An httpx client to use instead of creating one. The caller keeps ownership of it.
            error_backoff_seconds: Delay after a failed poll. None applies the package default.
        """
        super().__init__(polling_interval=options.polling_interval, error_backoff_seconds=error_backoff_seconds)
        self.options = options

        headers = dict(options.headers)
        if options.bearer_token:
            headers["Authorization"] = f"Bearer {options.bearer_token}"
        self._headers = headers

        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=options.timeout_seconds or remote_config_provider_settings.http_timeout_seconds,
            follow_redirects=True,
        )
        logger.debug(f"HTTPConfigManager initialized for {options.url}")

    @property
    @override
    def location(self) -> str:
        return self.options.url

    @override
    def _fetch(self, previous_token: str | None) -> FetchResult | None:
        headers = {**self._headers, **_conditional_headers(previous_token)}
        try:
            response = self._client.get(self.options.url, headers=headers)
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out fetching {self.location}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Network error fetching {self.location}: {e}") from e

        if response.status_code == 304:
            if previous_token is None:
                raise FetchError(f"{self.location} answered 304 to an unconditional request")
            return None

        if not response.is_success:
            raise FetchError(f"{self.location} returned HTTP {response.status_code}")

        return FetchResult(content=response.content, token=_token_from_response(response))

    @override
    def close(self) -> None:
        """Close the underlying httpx client if this manager created it."""
        if self._owns_client:
            self._client.close()
