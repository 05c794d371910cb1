"""GitHub error classes and HTTP/transport error classification.

Every hard failure raised by the REST layer is a `GitHubError`. Each one
carries an immutable `ErrorRecord` describing what went wrong, and its string
form is the multi-line diagnostic a caller can display as-is:

    Client error '422 Unprocessable Entity' for url '...'
    422 | Unprocessable Entity
    Validation Failed | https://docs.github.com/rest
    resource=Label, field=name, code=already_exists
    RequestId: 0400:1F2E:3D4C:5B6A

Transport failures (DNS, refused connections, timeouts) have no HTTP response,
so their record only holds the transport message.
"""
from __future__ import annotations
from typing import Any, List, Optional
import json
import logging

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-GitHub-Request-Id"

NOT_FOUND_HINT = (
    "This typically happens when the current user isn't properly authenticated. "
    "GitHub answers 404 instead of 403 for private resources, so you may need an "
    "access token with additional scopes (set GITHUB_TOKEN)."
)


class ErrorRecord(BaseModel):
    """Everything known about one failed logical call.

    Attributes:
        transport_message: Message of the underlying transport/HTTP exception.
        http_status_code: HTTP status, when a response was received.
        http_status_text: HTTP reason phrase, when a response was received.
        body_message: GitHub's `message` field from a JSON error body.
        documentation_url: GitHub's `documentation_url` from a JSON error body.
        request_id: Value of the X-GitHub-Request-Id response header.
        raw_body: Undecoded response body.
        diagnostics: Extra lines (detail entries, raw bodies) in display order.
        hints: Human hints appended after everything else.
    """

    model_config = ConfigDict(frozen=True)

    transport_message: str
    http_status_code: Optional[int] = None
    http_status_text: Optional[str] = None
    body_message: Optional[str] = None
    documentation_url: Optional[str] = None
    request_id: Optional[str] = None
    raw_body: Optional[str] = None
    diagnostics: tuple[str, ...] = ()
    hints: tuple[str, ...] = ()

    def format(self) -> str:
        lines: List[str] = [self.transport_message]
        if self.http_status_code is not None:
            lines.append(f"{self.http_status_code} | {self.http_status_text or ''}".rstrip(" |"))
        if self.body_message:
            lines.append(f"{self.body_message} | {self.documentation_url or ''}".rstrip(" |"))
        lines.extend(self.diagnostics)
        if self.request_id:
            lines.append(f"RequestId: {self.request_id}")
        lines.extend(self.hints)
        return "\n".join(line for line in lines if line)


class GitHubError(Exception):
    """Base exception for GitHub REST operations."""

    def __init__(self, message: str, record: ErrorRecord | None = None):
        super().__init__(message)
        self.message = message
        self.record = record

    @classmethod
    def from_record(cls, record: ErrorRecord) -> "GitHubError":
        return cls(record.format(), record)

    @property
    def request_id(self) -> str | None:
        return self.record.request_id if self.record else None

    def __str__(self) -> str:
        return self.message


class GitHubTransportError(GitHubError):
    """Raised when no HTTP response was received (DNS, refused connection...)."""

    pass


class GitHubTimeoutError(GitHubTransportError):
    """Raised when a request exceeds the configured timeout."""

    pass


class GitHubHttpError(GitHubError):
    """Raised for any response that is neither 2xx nor a tolerated 202."""

    @property
    def status_code(self) -> int | None:
        return self.record.http_status_code if self.record else None


class GitHubRetryExhaustedError(GitHubError):
    """Raised when GitHub kept answering 202 past the configured retry limit."""

    pass


class GitHubValidationError(GitHubError, ValueError):
    """Raised for a malformed request (e.g. a body on a GET)."""

    pass


def _render_entry(entry: Any) -> str:
    """Render one `details`/`errors` entry on a single line."""
    if isinstance(entry, dict):
        return ", ".join(f"{k}={v}" for k, v in entry.items())
    return str(entry).strip()


def classify_transport_error(exc: Exception) -> ErrorRecord:
    """Build the record for a failure that produced no HTTP response."""
    return ErrorRecord(transport_message=str(exc) or exc.__class__.__name__)


def classify_http_error(response: httpx.Response, transport_message: str | None = None) -> ErrorRecord:
    """Build the record for a non-success HTTP response.

    Args:
        response: The failed response (body already read).
        transport_message: Message of the exception raised for the response;
            derived from the status line when omitted.

    Returns:
        An `ErrorRecord` holding the status, GitHub's structured message and
        documentation link, one diagnostic line per `details`/`errors` entry,
        the raw body when it is not a simple message object, the request id,
        and an authentication hint for 404s.
    """
    if transport_message is None:
        transport_message = (
            f"{response.request.method} {response.request.url} failed with status {response.status_code}"
        )

    raw = response.text
    request_id = response.headers.get(REQUEST_ID_HEADER)
    body_message: str | None = None
    doc_url: str | None = None
    diagnostics: List[str] = []

    if raw.strip():
        try:
            body = json.loads(raw)
        except ValueError:
            diagnostics.append(f"Unable to format error as JSON. Raw: {raw.strip()}")
        else:
            if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"].strip():
                body_message = body["message"].strip()
                doc_url = (body.get("documentation_url") or "").strip() or None
                for key in ("details", "errors"):
                    entries = body.get(key)
                    if isinstance(entries, list):
                        diagnostics.extend(_render_entry(e) for e in entries)
            elif isinstance(body, str):
                diagnostics.append(body.strip())
            else:
                diagnostics.append(f"Raw: {json.dumps(body)}")

    hints: tuple[str, ...] = (NOT_FOUND_HINT,) if response.status_code == 404 else ()

    return ErrorRecord(
        transport_message=transport_message,
        http_status_code=response.status_code,
        http_status_text=response.reason_phrase or None,
        body_message=body_message,
        documentation_url=doc_url,
        request_id=request_id,
        raw_body=raw or None,
        diagnostics=tuple(diagnostics),
        hints=hints,
    )
