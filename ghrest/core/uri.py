"""Mapping between GitHub URLs and (owner, repository) pairs.

Example:
    ```python
    from ghrest.core.uri import split_uri, join_uri

    owner, repo = split_uri("https://api.github.com/repos/octocat/Hello-World/issues")
    # ("octocat", "Hello-World")
    join_uri(owner, repo)
    # "https://github.com/octocat/Hello-World"
    ```
"""
from __future__ import annotations
from typing import NamedTuple, Optional
import re

from .config import Settings, default_settings
from .errors import GitHubValidationError


class RepositoryElements(NamedTuple):
    owner_name: str
    repository_name: str


def _patterns(host: str) -> list[re.Pattern]:
    h = re.escape(host.strip().strip("/"))
    tail = r"(?:[/?#].*)?$"
    return [
        # https://api.github.com/repos/<owner>/<repo>
        re.compile(rf"^https?://api\.(?:www\.)?{h}/repos/([^/?#]+)/?([^/?#]+)?{tail}", re.I),
        # https://<enterprise-host>/api/v3/repos/<owner>/<repo>
        re.compile(rf"^https?://(?:www\.)?{h}/api/v3/repos/([^/?#]+)/?([^/?#]+)?{tail}", re.I),
        # https://github.com/<owner>/<repo>
        re.compile(rf"^https?://(?:www\.)?{h}/([^/?#]+)/?([^/?#]+)?{tail}", re.I),
    ]


def split_uri(url: str, host: str | None = None) -> RepositoryElements:
    """Extract the owner and repository names from a GitHub web or API URL.

    Args:
        url: A web URL (`https://github.com/<owner>/<repo>/...`) or an API URL
            (`https://api.github.com/repos/<owner>/<repo>/...`).
        host: GitHub host; defaults to the configured host.

    Returns:
        The pair of names. Both are empty strings when the URL matches
        neither form; the repository alone is empty for an owner-only URL.
    """
    host = host or default_settings().api_host_name
    for pattern in _patterns(host):
        m = pattern.match((url or "").strip())
        if m:
            return RepositoryElements(m.group(1), m.group(2) or "")
    return RepositoryElements("", "")


def join_uri(owner_name: str, repository_name: str, host: str | None = None) -> str:
    """Compose the canonical web URL `https://<host>/<owner>/<repo>`."""
    host = (host or default_settings().api_host_name).strip().strip("/")
    return f"https://{host}/{owner_name}/{repository_name}"


def resolve_repository_elements(
        uri: Optional[str] = None,
        owner_name: Optional[str] = None,
        repository_name: Optional[str] = None,
        settings: Optional[Settings] = None,
        validate: bool = True) -> RepositoryElements:
    """Work out which repository a caller means.

    A URI takes precedence; otherwise the explicit names are used, each one
    falling back to the configured default owner/repository.

    Args:
        uri: Web or API URL of the repository.
        owner_name: Owner of the repository.
        repository_name: Name of the repository.
        settings: Configuration supplying the host and the defaults.
        validate: Raise when a name cannot be determined.

    Returns:
        The resolved pair (possibly with empty names when `validate` is False).

    Raises:
        GitHubValidationError: If a URI is combined with explicit names, or
            when `validate` is set and a name is still missing.
    """
    settings = settings or default_settings()
    if uri:
        if owner_name or repository_name:
            raise GitHubValidationError("Specify either a URI or an owner/repository name, not both.")
        elements = split_uri(uri, settings.api_host_name)
    else:
        elements = RepositoryElements(
            owner_name or settings.default_owner_name,
            repository_name or settings.default_repository_name,
        )

    if validate:
        if not elements.owner_name:
            raise GitHubValidationError("Unable to determine the owner name.")
        if not elements.repository_name:
            raise GitHubValidationError("Unable to determine the repository name.")
    return elements
