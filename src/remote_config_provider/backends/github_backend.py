"""GitHub backend: serves one file of a repository through the GitHub contents API.

Change detection uses the ETag GitHub returns with every contents response, so an unchanged file costs one
request per poll and never triggers an emission.
"""

from __future__ import annotations

import hashlib
import os

from github import Auth, Github
from loguru import logger
from typing_extensions import override

from remote_config_provider.backends.base import ManagerOptions, PollingConfigManager
from remote_config_provider.exceptions import ConstructionError, FetchError, OptionsValidationError
from remote_config_provider.models import FetchResult


class GitHubOptions(ManagerOptions):
    """Location of a configuration file in a GitHub repository and the credentials to read it."""

    owner: str = ""
    """The user or organization owning the repository."""

    repository: str = ""
    """The repository name."""

    branch: str = ""
    """Branch, tag or commit to read. Empty means the repository's default branch."""

    path: str = ""
    """Path of the configuration file inside the repository."""

    token: str | None = None
    """Personal access token or fine-grained token."""

    app_id: int | None = None
    """GitHub App ID, for App installation authentication."""

    installation_id: int | None = None
    """GitHub App installation ID for the repository's owner."""

    private_key: str | None = None
    """GitHub App private key in PEM format. Mutually exclusive with `private_key_path`."""

    private_key_path: str | None = None
    """Path to the GitHub App private key (.pem). Mutually exclusive with `private_key`."""

    base_url: str | None = None
    """API root for GitHub Enterprise Server (e.g. https://github.example.com/api/v3). None means github.com."""

    @property
    def repo_owner_and_name(self) -> str:
        """Return the repository in 'owner/name' format."""
        return f"{self.owner}/{self.repository}"

    def uses_app_auth(self) -> bool:
        """Whether any GitHub App credential field is set."""
        return any(
            value is not None for value in (self.app_id, self.installation_id, self.private_key, self.private_key_path)
        )

    @override
    def validate_options(self) -> None:
        if not self.owner:
            raise OptionsValidationError("owner is required")
        if not self.repository:
            raise OptionsValidationError("repository is required")
        if not self.path:
            raise OptionsValidationError("path is required")

        if self.uses_app_auth():
            if self.app_id is None or self.installation_id is None:
                raise OptionsValidationError("GitHub App authentication requires both app_id and installation_id")
            if self.private_key and self.private_key_path:
                raise OptionsValidationError(
                    "private_key and private_key_path are mutually exclusive. Please use only one."
                )
            if not self.private_key and not self.private_key_path:
                raise OptionsValidationError("GitHub App authentication requires private_key or private_key_path")
        elif not self.token:
            raise OptionsValidationError("a token or GitHub App credentials are required")

        self._validate_polling_interval()

    def get_private_key_content(self) -> str:
        """Get the App private key content, loading it from `private_key_path` if necessary.

        Raises:
            ConstructionError: If the key file cannot be read or the key is not PEM.
        """
        if self.private_key_path:
            logger.debug(f"Loading GitHub App private key from file: {self.private_key_path}")
            if not os.path.exists(self.private_key_path):
                raise ConstructionError(f"Private key file not found at: {self.private_key_path}")
            try:
                with open(self.private_key_path, encoding="utf-8") as f:
                    content = f.read()
            except OSError as e:
                raise ConstructionError(f"Failed to read private key from file {self.private_key_path}: {e}") from e
        else:
            content = self.private_key or ""

        if not content.strip().startswith("-----BEGIN"):
            raise ConstructionError("Private key does not appear to be in PEM format (should start with -----BEGIN).")
        return content


class GitHubConfigManager(PollingConfigManager):
    """Manager reading and watching one file of a GitHub repository."""

    def __init__(
        self,
        options: GitHubOptions,
        *,
        client: Github | None = None,
        error_backoff_seconds: float | None = None,
    ) -> None:
        """Create the GitHub client and bind the manager to the configured file.

        No request is made here; the repository handle is created lazily.

        Args:
            options: Validated GitHub options.
            client: An already authenticated client to use instead of building one from `options`.
            error_backoff_seconds: Delay after a failed poll. None applies the package default.

        Raises:
            ConstructionError: If the credentials cannot be turned into a client.
        """
        super().__init__(polling_interval=options.polling_interval, error_backoff_seconds=error_backoff_seconds)
        self.options = options
        self._owns_client = client is None
        self._client = client if client is not None else self._create_client(options)
        self._repo = self._client.get_repo(options.repo_owner_and_name, lazy=True)

    @staticmethod
    def _create_client(options: GitHubOptions) -> Github:
        auth: Auth.Auth
        if options.uses_app_auth():
            if options.app_id is None or options.installation_id is None:
                raise ConstructionError("GitHub App authentication requires both app_id and installation_id")
            try:
                app_auth = Auth.AppAuth(app_id=options.app_id, private_key=options.get_private_key_content())
                auth = app_auth.get_installation_auth(installation_id=options.installation_id)
            except ConstructionError:
                raise
            except Exception as e:
                raise ConstructionError(f"GitHub App authentication failed: {e}") from e
            logger.debug(
                f"Using GitHub App installation auth for app_id={options.app_id}, "
                f"installation_id={options.installation_id}"
            )
        else:
            if not options.token:
                raise ConstructionError("GitHub token authentication requires a token")
            auth = Auth.Token(options.token)
            logger.debug("Using GitHub token authentication")

        if options.base_url:
            return Github(auth=auth, base_url=options.base_url)
        return Github(auth=auth)

    @override
    def close(self) -> None:
        """Close the PyGithub client's connection pool if this manager created the client."""
        if self._owns_client:
            self._client.close()

    @property
    @override
    def location(self) -> str:
        ref = self.options.branch or "default branch"
        return f"github:{self.options.repo_owner_and_name}@{ref}:{self.options.path}"

    @override
    def _fetch(self, previous_token: str | None) -> FetchResult:
        if self.options.branch:
            contents = self._repo.get_contents(self.options.path, ref=self.options.branch)
        else:
            contents = self._repo.get_contents(self.options.path)

        if isinstance(contents, list):
            raise FetchError(f"{self.location} is a directory; only single files can be served")
        if contents.encoding != "base64":
            raise FetchError(f"{self.location} was returned without inline content (encoding {contents.encoding!r})")

        content = contents.decoded_content
        token = contents.etag or contents.last_modified or f"sha256:{hashlib.sha256(content).hexdigest()}"
        return FetchResult(content=content, token=token)
