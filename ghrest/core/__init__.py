"""Core functionality for the GitHub REST access layer.

This module contains the pieces every GitHub resource call goes through:
- Request execution (headers, 202 retries, decoding, error classification)
- Multi-page collection fetching
- Repository URL mapping
- Date normalization of decoded responses
- Configuration management
"""

from .config import load_settings, default_settings, Settings, RetryPolicy
from .errors import (
    ErrorRecord,
    GitHubError,
    GitHubTransportError,
    GitHubTimeoutError,
    GitHubHttpError,
    GitHubRetryExhaustedError,
    GitHubValidationError,
)
from .media import MEDIA_TYPE_V3, media_accept_header
from .normalize import normalize
from .pagination import fetch_all
from .rest import RequestDescriptor, ResponseEnvelope, RestClient, execute, parse_link_header
from .uri import split_uri, join_uri, resolve_repository_elements, RepositoryElements

__all__ = [
    "load_settings",
    "default_settings",
    "Settings",
    "RetryPolicy",
    "ErrorRecord",
    "GitHubError",
    "GitHubTransportError",
    "GitHubTimeoutError",
    "GitHubHttpError",
    "GitHubRetryExhaustedError",
    "GitHubValidationError",
    "MEDIA_TYPE_V3",
    "media_accept_header",
    "normalize",
    "fetch_all",
    "RequestDescriptor",
    "ResponseEnvelope",
    "RestClient",
    "execute",
    "parse_link_header",
    "split_uri",
    "join_uri",
    "resolve_repository_elements",
    "RepositoryElements",
]
