"""GitHub Watch Example.

This example registers a GitHub-backed provider, reads the configuration once, then prints every change
pushed to the file until interrupted.

Requires the GITHUB_TOKEN environment variable. Change OWNER/REPOSITORY/PATH to a repository you can read.
"""

import os
import sys

from remote_config_provider import (
    GitHubOptions,
    ProviderType,
    RemoteProviderDescriptor,
    configure_logger,
    default_host,
    register_github_provider,
)

OWNER = "my-org"
REPOSITORY = "config"
BRANCH = "main"
PATH = "config.yaml"


def main() -> int:
    token = os.getenv("GITHUB_TOKEN")
    if not token:
        print("GITHUB_TOKEN environment variable is required", file=sys.stderr)
        return 1

    configure_logger("INFO")

    register_github_provider(
        GitHubOptions(
            owner=OWNER,
            repository=REPOSITORY,
            branch=BRANCH,
            path=PATH,
            token=token,
            polling_interval=10,
        )
    )

    remote_config = default_host.remote_config
    assert remote_config is not None
    descriptor = RemoteProviderDescriptor(provider=str(ProviderType.github), endpoint="github.com", path=PATH)

    print("Reading remote config...")
    print(remote_config.get(descriptor).read().decode())

    responses, quit_event = remote_config.watch_channel(descriptor)
    try:
        while True:
            response = responses.get()
            if response.error is not None:
                print(f"Poll failed: {response.error}", file=sys.stderr)
                continue
            assert response.value is not None
            print("Configuration changed:")
            print(response.value.decode())
    except KeyboardInterrupt:
        quit_event.set()
    return 0


if __name__ == "__main__":
    sys.exit(main())
