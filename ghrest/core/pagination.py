"""Multi-page collection fetching.

`fetch_all` follows the `rel="next"` links GitHub returns for collection
endpoints and concatenates every page, in order, into one list.

Example:
    ```python
    from ghrest.core.pagination import fetch_all
    from ghrest.core.rest import RequestDescriptor

    issues = fetch_all(RequestDescriptor("repos/octocat/Hello-World/issues?per_page=100"))
    ```
"""
from __future__ import annotations
from dataclasses import replace
from typing import Any, List, Optional, Protocol
import logging

from .rest import RequestDescriptor, RestClient

logger = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    def update(self, description: str, page: int, total: int) -> None:
        ...

    def complete(self) -> None:
        ...


class LoggingProgress:
    """Reports progress through the module logger."""

    def update(self, description: str, page: int, total: int) -> None:
        logger.info(page_status(description, page, total))

    def complete(self) -> None:
        logger.debug("Multi-page request completed")


def page_status(description: str, page: int, total: int) -> str:
    """Human-readable status, e.g. "Getting issues (page 2 of 7)"."""
    of = str(total) if total > 0 else "(unknown)"
    return f"{description} (page {page} of {of})"


def fetch_all(d: RequestDescriptor,
              single_page: bool = False,
              client: Optional[RestClient] = None,
              progress: Optional[ProgressReporter] = None) -> List[Any]:
    """Fetch every page of a collection endpoint.

    Args:
        d: Descriptor of the first page. It is always sent as a GET without a
            body; every other field is kept for the follow-up pages.
        single_page: Stop after the first page.
        client: REST client; defaults to a client on the default settings.
        progress: Progress reporter; defaults to `LoggingProgress`. It is
            updated after every page of a multi-page collection, the last
            one included.

    Returns:
        The items of all pages in the order GitHub returned them. List payloads
        are flattened into the result; any other non-empty payload (e.g. a
        search result object) is appended as a single item.

    Raises:
        GitHubError: Any page failed. Pages fetched before the failure are
            discarded.
    """
    client = client or RestClient()
    progress = progress or LoggingProgress()
    threshold = client.settings.multi_request_progress_threshold
    description = d.description or f"Getting {d.path_or_url}"

    request = replace(d, method="GET", body=None, in_file=None, extended_result=True, description=description)
    results: List[Any] = []
    pages = 0
    total = 0
    try:
        while True:
            envelope = client.execute(request)
            pages += 1
            payload = envelope.payload
            if isinstance(payload, list):
                results.extend(payload)
            elif payload not in (None, "", {}):
                results.append(payload)

            cursor = envelope.next_page_cursor
            # the last page carries no rel="last" link; keep the total seen so far
            total = envelope.total_page_count or total
            paginated = cursor is not None or pages > 1
            if paginated and threshold > 0 and (total == 0 or total >= threshold):
                progress.update(description, pages, total)

            if single_page or not cursor:
                break
            request = replace(request, path_or_url=cursor)
    finally:
        progress.complete()
    return results
