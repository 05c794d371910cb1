"""Accept header values for the GitHub REST API."""
from __future__ import annotations
from typing import Optional

MEDIA_TYPE_V3 = "application/vnd.github.v3+json"

# Preview media types for endpoints still gated behind them.
INERTIA_PREVIEW = "application/vnd.github.inertia-preview+json"
SQUIRREL_GIRL_PREVIEW = "application/vnd.github.squirrel-girl-preview"
SYMMETRA_PREVIEW = "application/vnd.github.symmetra-preview+json"
LUKE_CAGE_PREVIEW = "application/vnd.github.luke-cage-preview+json"
MERCY_PREVIEW = "application/vnd.github.mercy-preview+json"
BAPTISTE_PREVIEW = "application/vnd.github.baptiste-preview+json"

# Content negotiation for comment/issue bodies.
MEDIA_TYPES = ("raw", "text", "html", "full")


def media_accept_header(media_type: str = "raw", as_json: bool = True, accept: Optional[str] = None) -> str:
    """Build an Accept header selecting how bodies are rendered.

    Args:
        media_type: One of "raw", "text", "html" or "full".
        as_json: Append the "+json" suffix.
        accept: Existing accept value (e.g. a preview type) to combine with.

    Returns:
        e.g. "application/vnd.github.html+json", or
        "<accept>,application/vnd.github.html+json" when `accept` is given.

    Raises:
        ValueError: If `media_type` is not a known rendering.
    """
    kind = media_type.lower()
    if kind not in MEDIA_TYPES:
        raise ValueError(f"Media type must be one of {', '.join(MEDIA_TYPES)}: {media_type}")
    header = f"application/vnd.github.{kind}"
    if as_json:
        header += "+json"
    if accept:
        header = f"{accept},{header}"
    return header
