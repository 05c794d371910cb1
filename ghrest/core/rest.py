"""GitHub REST request executor.

This module issues one logical call against the GitHub REST v3 API: it
composes the URL and headers, sends the request with httpx, re-issues GETs
that GitHub answers with 202 ("still computing, retry later"), decodes and
normalizes the body, extracts pagination/rate-limit/caching metadata, and
turns every failure into a single `GitHubError`.

Authentication:
    The token is taken from the request descriptor, then from the client,
    then from `GITHUB_TOKEN` (see `ghrest.core.config`). Without a token,
    requests use unauthenticated rate limits:
    - Unauthenticated: 60 requests/hour per IP
    - Authenticated: 5,000 requests/hour per token

Example:
    ```python
    from ghrest.core.rest import RequestDescriptor, RestClient

    client = RestClient()
    repo = client.execute(RequestDescriptor("repos/octocat/Hello-World"))
    print(repo["created_at"].year)

    result = client.execute(RequestDescriptor(
        "repos/octocat/Hello-World/labels",
        method="POST",
        body='{"name": "triage", "color": "ededed"}',
        extended_result=True,
    ))
    print(result.status_code, result.rate_limit.remaining)
    ```
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, NamedTuple, Optional, Union
import json
import logging
import mimetypes
import re
import tempfile
import time

import httpx
from pydantic import BaseModel, ConfigDict

from .config import Settings, default_settings
from .errors import (
    REQUEST_ID_HEADER,
    ErrorRecord,
    GitHubError,
    GitHubHttpError,
    GitHubRetryExhaustedError,
    GitHubTimeoutError,
    GitHubTransportError,
    GitHubValidationError,
    classify_http_error,
    classify_transport_error,
)
from .media import MEDIA_TYPE_V3
from .normalize import normalize
from .telemetry import NullTelemetry, TelemetryHook, emit_event, emit_exception

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST", "PATCH", "PUT", "DELETE")
BODY_METHODS = ("POST", "PATCH", "PUT", "DELETE")
DEFAULT_CONTENT_TYPE = "application/json; charset=UTF-8"
FALLBACK_FILE_CONTENT_TYPE = "text/plain"

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.I)
_LINK_RE = re.compile(r'<([^>]*)>\s*;\s*rel="([^"]+)"')


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to issue one logical call.

    Attributes:
        path_or_url: API path fragment ("repos/o/r/labels") or an absolute URL
            such as a pagination link returned by GitHub.
        method: GET, POST, PATCH, PUT or DELETE.
        body: Request body; only allowed for POST, PATCH, PUT and DELETE.
        accept: Accept header; defaults to the v3 JSON media type.
        content_type: Content-Type sent with a body.
        auth_token: Token overriding the client's token for this call.
        extended_result: Return a `ResponseEnvelope` instead of the payload.
        save_to_file: Save the response body to a temporary file and return
            its path.
        description: Human label for logs and progress output.
        in_file: File uploaded as the body of a POST.
        out_file: Destination the response body is saved to.
        additional_headers: Extra headers, applied after the standard ones.
        normalize_dates: Parse known date fields of JSON payloads.
        telemetry_event_name: Name reported to the telemetry hook.
    """

    path_or_url: str
    method: str = "GET"
    body: Union[str, bytes, None] = None
    accept: str = MEDIA_TYPE_V3
    content_type: str = DEFAULT_CONTENT_TYPE
    auth_token: Optional[str] = None
    extended_result: bool = False
    save_to_file: bool = False
    description: str = ""
    in_file: Union[str, Path, None] = None
    out_file: Union[str, Path, None] = None
    additional_headers: Mapping[str, str] = field(default_factory=dict)
    normalize_dates: bool = True
    telemetry_event_name: str = "rest_call"

    def __post_init__(self):
        method = (self.method or "").upper()
        object.__setattr__(self, "method", method)
        if method not in ALLOWED_METHODS:
            raise GitHubValidationError(f"Unsupported method {self.method!r}; expected one of {', '.join(ALLOWED_METHODS)}.")
        if self.body is not None and method not in BODY_METHODS:
            raise GitHubValidationError(f"A body can only be sent with {', '.join(BODY_METHODS)}, not {method}.")
        if self.in_file is not None:
            if method != "POST":
                raise GitHubValidationError("A file can only be uploaded with POST.")
            if self.body is not None:
                raise GitHubValidationError("A request cannot carry both a body and an input file.")

    @property
    def is_state_changing(self) -> bool:
        return self.method != "GET"


class PageLinks(NamedTuple):
    next_cursor: Optional[str] = None
    next_page_number: int = 0
    total_page_count: int = 0


class RateLimit(BaseModel):
    model_config = ConfigDict(frozen=True)

    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset_at: Optional[datetime] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimit":
        reset = _int_or_none(headers.get("X-RateLimit-Reset"))
        return cls(
            limit=_int_or_none(headers.get("X-RateLimit-Limit")),
            remaining=_int_or_none(headers.get("X-RateLimit-Remaining")),
            reset_at=datetime.fromtimestamp(reset, tz=timezone.utc) if reset is not None else None,
        )


class CachingValidators(BaseModel):
    model_config = ConfigDict(frozen=True)

    last_modified: Optional[str] = None
    etag: Optional[str] = None
    if_none_match: Optional[str] = None
    if_modified_since: Optional[str] = None


class ResponseEnvelope(BaseModel):
    """Decoded payload plus the response metadata of one logical call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    payload: Any = None
    status_code: int
    request_id: Optional[str] = None
    next_page_cursor: Optional[str] = None
    next_page_number: int = 0
    total_page_count: int = 0
    link_header_raw: Optional[str] = None
    caching: CachingValidators = CachingValidators()
    rate_limit: RateLimit = RateLimit()


@dataclass
class RetryState:
    """Attempt bookkeeping for one logical call."""

    attempts_made: int
    max_attempts: int
    delay_seconds: float

    @property
    def can_retry(self) -> bool:
        return self.attempts_made < self.max_attempts

    @property
    def retries_made(self) -> int:
        return max(self.attempts_made - 1, 0)


def _int_or_none(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _int_param(url: str, name: str) -> Optional[int]:
    try:
        return _int_or_none(httpx.URL(url).params.get(name))
    except httpx.InvalidURL:
        return None


def parse_link_header(raw: Optional[str]) -> PageLinks:
    """Extract pagination metadata from a `Link` response header.

    Args:
        raw: Header value, e.g.
            `<https://api.github.com/...&page=2>; rel="next", <...&page=5>; rel="last"`.

    Returns:
        `PageLinks` with the next URL and its page number, and the total page
        count taken from `rel="last"`. A `since=N` next link (id-based
        cursor) or a next link without a page number leaves the total at 0,
        meaning unknown.
    """
    if not raw:
        return PageLinks()

    next_cursor: Optional[str] = None
    next_page = 0
    total = 0
    total_unknown = False
    for url, rel in _LINK_RE.findall(raw):
        rels = rel.split()
        if "next" in rels:
            next_cursor = url
            page = _int_param(url, "page")
            if page is not None:
                next_page = page
            else:
                total_unknown = True
                next_page = _int_param(url, "since") or 0
        if "last" in rels:
            last = _int_param(url, "page")
            if last is not None:
                total = last

    if total_unknown:
        total = 0
    return PageLinks(next_cursor, next_page, total)


class RestClient:
    """Executes requests against the GitHub REST API.

    Attributes:
        settings: Immutable configuration used for every call.
        access_token: Token used when a descriptor supplies none.
        telemetry: Fire-and-forget hook notified of successes and failures.
    """

    def __init__(self,
                 settings: Settings | None = None,
                 access_token: str | None = None,
                 telemetry: TelemetryHook | None = None,
                 transport: httpx.BaseTransport | None = None):
        """Initialize the client.

        Args:
            settings: Configuration; defaults to `default_settings()`.
            access_token: Token overriding `settings.access_token`.
            telemetry: Telemetry hook; defaults to a no-op hook.
            transport: httpx transport, e.g. `httpx.MockTransport` in tests.
        """
        self.settings = settings or default_settings()
        self.access_token = access_token or self.settings.access_token
        self.telemetry = telemetry or NullTelemetry()
        self._transport = transport

    # ---- request composition ---------------------------------------------

    def url_for(self, path_or_url: str) -> str:
        if _SCHEME_RE.match(path_or_url):
            return path_or_url
        return f"{self.settings.api_base_url}/{path_or_url.strip('/')}"

    def _headers(self, d: RequestDescriptor, content_type: Optional[str]) -> Dict[str, str]:
        h = {
            "Accept": d.accept or MEDIA_TYPE_V3,
            "User-Agent": self.settings.user_agent,
        }
        token = d.auth_token or self.access_token
        if token:
            h["Authorization"] = f"token {token}"
        if content_type:
            h["Content-Type"] = content_type
        h.update(d.additional_headers)
        return h

    def _content(self, d: RequestDescriptor) -> tuple[Optional[bytes], Optional[str]]:
        if d.in_file is not None:
            path = Path(d.in_file)
            guessed, _ = mimetypes.guess_type(path.name)
            try:
                data = path.read_bytes()
            except OSError as exc:
                raise GitHubValidationError(f"Unable to read input file {path}: {exc.strerror or exc}") from exc
            return data, guessed or FALLBACK_FILE_CONTENT_TYPE
        if d.body is None:
            return None, None
        body = d.body.encode("utf-8") if isinstance(d.body, str) else d.body
        return body, d.content_type or DEFAULT_CONTENT_TYPE

    def _http_client(self) -> httpx.Client:
        timeout = self.settings.timeout_seconds or None
        return httpx.Client(timeout=timeout, transport=self._transport, follow_redirects=True)

    # ---- execution --------------------------------------------------------

    def execute(self, d: RequestDescriptor) -> Any:
        """Run one logical call and return its payload or envelope.

        Args:
            d: The request to issue.

        Returns:
            The decoded payload (dict/list with dates parsed, `str`, `bytes`,
            a `Path` for saved files, or None for empty bodies), or a
            `ResponseEnvelope` when `d.extended_result` is set.

        Raises:
            GitHubTransportError: No response was received.
            GitHubHttpError: GitHub answered with a non-success status.
            GitHubRetryExhaustedError: A GET stayed at 202 past the retry limit.
        """
        url = self.url_for(d.path_or_url)
        label = d.description or f"{d.method} {url}"
        policy = self.settings.retry_policy
        retry = RetryState(attempts_made=0, max_attempts=policy.max_retries + 1, delay_seconds=policy.delay_seconds)
        started = time.monotonic()

        try:
            content, content_type = self._content(d)
            headers = self._headers(d, content_type)
            logger.debug("Executing: %s (%s %s)", label, d.method, url)
            if content is not None and self.settings.log_request_body:
                logger.debug("Request body: %s", content.decode("utf-8", errors="replace"))

            saving = d.out_file is not None or d.save_to_file
            with self._http_client() as client:
                response = self._send(client, d, url, headers, content, retry, stream=saving)
                try:
                    payload = self._save(response, d) if saving else self._decode(response, d)
                finally:
                    response.close()
        except GitHubError as exc:
            logger.debug("%s failed:\n%s", label, exc)
            emit_exception(self.telemetry, exc, {
                "description": label,
                "method": d.method,
                "request_id": exc.request_id,
            })
            raise

        if d.is_state_changing and policy.settle_delay_seconds > 0:
            logger.debug("Waiting %s seconds after %s for GitHub to settle", policy.settle_delay_seconds, d.method)
            time.sleep(policy.settle_delay_seconds)

        request_id = response.headers.get(REQUEST_ID_HEADER)
        emit_event(self.telemetry, d.telemetry_event_name, {
            "description": label,
            "method": d.method,
            "status_code": response.status_code,
            "request_id": request_id,
        }, {"duration_seconds": time.monotonic() - started, "attempts": retry.attempts_made})

        if not d.extended_result:
            return payload

        link = response.headers.get("Link")
        links = parse_link_header(link)
        return ResponseEnvelope(
            payload=payload,
            status_code=response.status_code,
            request_id=request_id,
            next_page_cursor=links.next_cursor,
            next_page_number=links.next_page_number,
            total_page_count=links.total_page_count,
            link_header_raw=link,
            caching=CachingValidators(
                last_modified=response.headers.get("Last-Modified"),
                etag=response.headers.get("ETag"),
                if_none_match=response.headers.get("If-None-Match"),
                if_modified_since=response.headers.get("If-Modified-Since"),
            ),
            rate_limit=RateLimit.from_headers(response.headers),
        )

    def _send(self,
              client: httpx.Client,
              d: RequestDescriptor,
              url: str,
              headers: Dict[str, str],
              content: Optional[bytes],
              retry: RetryState,
              stream: bool = False) -> httpx.Response:
        """Send until GitHub stops answering 202 (GET only).

        With `stream` set the body of a successful response is left unread;
        the caller consumes and closes it.
        """
        while True:
            try:
                request = client.build_request(d.method, url, headers=headers, content=content)
                response = client.send(request, stream=stream)
            except httpx.HTTPError as exc:
                raise _transport_error(exc) from exc
            retry.attempts_made += 1

            if response.status_code == 202:
                if d.is_state_changing:
                    logger.info("%s %s was accepted (202); state-changing calls are not retried", d.method, url)
                    return response
                if retry.delay_seconds <= 0:
                    logger.info("%s is still being processed (202) and retrying is disabled", url)
                    return response
                if retry.can_retry:
                    logger.warning(
                        "%s is still being processed by GitHub (202); retry %d of %d in %s seconds",
                        url, retry.attempts_made, retry.max_attempts - 1, retry.delay_seconds,
                    )
                    response.close()
                    time.sleep(retry.delay_seconds)
                    continue
                response.close()
                raise GitHubRetryExhaustedError.from_record(ErrorRecord(
                    transport_message=(
                        f"Request still not ready after {retry.retries_made} retries. Retry again later."
                    ),
                    http_status_code=202,
                    http_status_text=response.reason_phrase or None,
                    request_id=response.headers.get(REQUEST_ID_HEADER),
                ))

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                try:
                    response.read()
                except httpx.HTTPError as read_exc:
                    raise _transport_error(read_exc) from read_exc
                finally:
                    response.close()
                # httpx appends a generic "For more information check: ..." line
                message = str(exc).splitlines()[0]
                raise GitHubHttpError.from_record(classify_http_error(response, message)) from exc
            return response

    def _decode(self, response: httpx.Response, d: RequestDescriptor) -> Any:
        if not response.content:
            return None

        ctype = response.headers.get("Content-Type", "").lower()
        if "json" in ctype:
            try:
                payload = json.loads(response.text)
            except ValueError as exc:
                logger.warning("Unable to decode JSON response from %s (%s); returning the raw text", response.url, exc)
                return response.text
            if not d.normalize_dates or self.settings.disable_smarter_objects:
                return payload
            return normalize(payload)

        if not ctype or ctype.startswith("text/") or "charset=" in ctype:
            return response.text
        return response.content

    def _save(self, response: httpx.Response, d: RequestDescriptor) -> Path:
        if d.out_file is not None:
            path = Path(d.out_file)
        else:
            with tempfile.NamedTemporaryFile(prefix="ghrest-", delete=False) as tmp:
                path = Path(tmp.name)
        written = 0
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
                    written += len(chunk)
        except httpx.HTTPError as exc:
            raise _transport_error(exc) from exc
        except OSError as exc:
            raise GitHubValidationError(f"Unable to write output file {path}: {exc.strerror or exc}") from exc
        logger.debug("Saved %d bytes to %s", written, path)
        return path


def _transport_error(exc: httpx.HTTPError) -> GitHubTransportError:
    record = classify_transport_error(exc)
    if isinstance(exc, httpx.TimeoutException):
        return GitHubTimeoutError.from_record(record)
    return GitHubTransportError.from_record(record)


def execute(d: RequestDescriptor, settings: Settings | None = None) -> Any:
    """Execute `d` with a client built from `settings` (or the defaults)."""
    return RestClient(settings).execute(d)
