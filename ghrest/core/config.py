"""Configuration management for ghrest.

This module handles loading and merging configuration from multiple sources:
1. Environment variables (highest priority)
2. TOML configuration file (medium priority)
3. Default values (lowest priority)

The resulting `Settings` value is immutable. It is assembled once for the
process by `default_settings()` and handed explicitly to the REST client, so a
call in flight never observes a configuration change.

Example config.toml:
    ```toml
    [github]
    api_host_name = "github.com"
    default_owner_name = "octocat"

    [rest]
    timeout_seconds = 20.0
    retry_delay_seconds = 30
    max_retries = 30
    state_change_delay_seconds = 0
    multi_request_progress_threshold = 10

    [logging]
    level = "INFO"
    ```

Environment Variables:
    GITHUB_TOKEN: Access token sent with every request.
    GITHUB_API_HOST: Override the GitHub host (e.g. a GitHub Enterprise host).
    GHREST_TIMEOUT: Override the per-request timeout in seconds.
    GHREST_RETRY_DELAY: Override the delay between "not ready" retries.
    GHREST_MAX_RETRIES: Override the maximum number of "not ready" retries.
    GHREST_STATE_CHANGE_DELAY: Override the settle delay after mutations.
    GHREST_LOG_LEVEL: Override the CLI log level.
"""
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os
import tomllib  # Python 3.11+
from dotenv import load_dotenv

from .. import __version__

load_dotenv()

PUBLIC_HOST = "github.com"


@dataclass(frozen=True)
class RetryPolicy:
    """Timing rules applied to every logical call.

    Attributes:
        max_retries: How many times a GET answered with 202 is re-issued.
        delay_seconds: Pause before each re-issue. 0 disables retrying.
        settle_delay_seconds: Pause after a successful state-changing call.
    """

    max_retries: int = 30
    delay_seconds: float = 30
    settle_delay_seconds: float = 0


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from `config.toml` and environment.

    Values are merged with precedence: environment > config file > defaults.

    Attributes:
        api_host_name: GitHub host; anything other than github.com is treated
            as a GitHub Enterprise host.
        default_owner_name: Owner used when a caller supplies none.
        default_repository_name: Repository used when a caller supplies none.
        access_token: Token sent as the Authorization header, if any.
        timeout_seconds: Per-request timeout. 0 means no timeout.
        retry_delay_seconds: Delay between retries of a 202 response.
        max_retries: Maximum retries of a 202 response.
        state_change_delay_seconds: Settle delay after POST/PATCH/PUT/DELETE.
        multi_request_progress_threshold: Page count at which multi-page
            fetches start reporting progress. 0 disables progress.
        disable_smarter_objects: Skip date normalization of responses.
        log_request_body: Log request bodies at DEBUG level.
        user_agent: User-Agent header value.
        log_level: Level the CLI configures logging with.
    """

    # GitHub configuration
    api_host_name: str = PUBLIC_HOST
    default_owner_name: str = ""
    default_repository_name: str = ""
    access_token: str | None = None

    # Request configuration
    timeout_seconds: float = 20.0
    retry_delay_seconds: float = 30
    max_retries: int = 30
    state_change_delay_seconds: float = 0
    multi_request_progress_threshold: int = 10
    disable_smarter_objects: bool = False
    log_request_body: bool = False
    user_agent: str = f"ghrest/{__version__}"

    # Logging configuration
    log_level: str = "WARNING"

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            delay_seconds=self.retry_delay_seconds,
            settle_delay_seconds=self.state_change_delay_seconds,
        )

    @property
    def api_base_url(self) -> str:
        return api_base_url(self.api_host_name)


def api_base_url(host: str) -> str:
    """Return the REST API root for `host`.

    Args:
        host: GitHub host name, e.g. "github.com" or "git.example.com".

    Returns:
        "https://api.github.com" for the public host, otherwise the GitHub
        Enterprise form "https://<host>/api/v3".
    """
    host = host.strip().strip("/")
    if host.lower() == PUBLIC_HOST:
        return f"https://api.{PUBLIC_HOST}"
    return f"https://{host}/api/v3"


def load_config(path: str = "config.toml") -> dict:
    """Load a TOML config file into a dictionary.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        Dictionary containing configuration data, or empty dict if file missing.
    """
    p = Path(path)
    if not p.exists():
        return {}
    with p.open("rb") as f:
        return tomllib.load(f)


def _env_bool(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def load_settings(config_path: str | None = None) -> Settings:
    """Create a `Settings` object from config file and environment variables.

    Args:
        config_path: Path to TOML config file. Defaults to "config.toml".

    Returns:
        Settings object with merged configuration from all sources.

    Example:
        ```python
        from ghrest.core.config import load_settings

        settings = load_settings("ghrest.toml")
        print(settings.api_base_url)
        ```
    """
    cfg = load_config(config_path or "config.toml")
    d = Settings()

    # github section
    gh = cfg.get("github", {})
    host = os.getenv("GITHUB_API_HOST", gh.get("api_host_name", d.api_host_name))

    # rest section
    rest = cfg.get("rest", {})

    # logging section
    lg = cfg.get("logging", {})

    return Settings(
        api_host_name=host,
        default_owner_name=gh.get("default_owner_name", d.default_owner_name),
        default_repository_name=gh.get("default_repository_name", d.default_repository_name),
        access_token=os.getenv("GITHUB_TOKEN") or None,
        timeout_seconds=float(os.getenv("GHREST_TIMEOUT", rest.get("timeout_seconds", d.timeout_seconds))),
        retry_delay_seconds=float(os.getenv("GHREST_RETRY_DELAY", rest.get("retry_delay_seconds", d.retry_delay_seconds))),
        max_retries=int(os.getenv("GHREST_MAX_RETRIES", rest.get("max_retries", d.max_retries))),
        state_change_delay_seconds=float(
            os.getenv("GHREST_STATE_CHANGE_DELAY", rest.get("state_change_delay_seconds", d.state_change_delay_seconds))
        ),
        multi_request_progress_threshold=int(
            rest.get("multi_request_progress_threshold", d.multi_request_progress_threshold)
        ),
        disable_smarter_objects=_env_bool(rest.get("disable_smarter_objects", d.disable_smarter_objects)),
        log_request_body=_env_bool(rest.get("log_request_body", d.log_request_body)),
        user_agent=rest.get("user_agent", d.user_agent),
        log_level=os.getenv("GHREST_LOG_LEVEL", lg.get("level", d.log_level)).upper(),
    )


@lru_cache(maxsize=1)
def default_settings() -> Settings:
    """Return the process-wide settings, loaded once from ./config.toml and env."""
    return load_settings()
