"""GitHub REST access layer.

A small client library that maps GitHub REST v3 calls onto Python function
calls. Resource-specific helpers (labels, releases, teams...) build a request
descriptor and hand it to the executor or the page aggregator provided here.

Features:
    - One-call executor with 202 "not ready" retries and settle delays
    - Link-header pagination with progress reporting
    - Rate-limit, ETag and request-id metadata on extended results
    - Date normalization of decoded responses
    - Single diagnosable error type for transport, HTTP and retry failures
    - Both CLI and programmatic interfaces

Quick Start:
    ```python
    import ghrest

    repo = ghrest.execute(ghrest.RequestDescriptor("repos/octocat/Hello-World"))
    issues = ghrest.fetch_all(ghrest.RequestDescriptor("repos/octocat/Hello-World/issues"))
    owner, name = ghrest.split_uri("https://github.com/octocat/Hello-World")
    ```

CLI Usage:
    ```bash
    ghrest request repos/octocat/Hello-World
    ghrest request repos/octocat/Hello-World/issues --all
    ghrest split https://github.com/octocat/Hello-World
    ```
"""

__version__ = "0.1.0"

# Re-export main functionality for easy importing
from .core import (
    RequestDescriptor,
    ResponseEnvelope,
    RestClient,
    execute,
    fetch_all,
    split_uri,
    join_uri,
    resolve_repository_elements,
    normalize,
    load_settings,
    Settings,
    GitHubError,
)

__all__ = [
    "RequestDescriptor",
    "ResponseEnvelope",
    "RestClient",
    "execute",
    "fetch_all",
    "split_uri",
    "join_uri",
    "resolve_repository_elements",
    "normalize",
    "load_settings",
    "Settings",
    "GitHubError",
]
