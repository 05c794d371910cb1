"""Date normalization of decoded GitHub JSON.

GitHub serializes timestamps as ISO-8601 strings. `normalize` returns a deep
copy of a decoded response in which the well-known date fields hold
timezone-aware `datetime` values instead, at any nesting depth.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, FrozenSet
import logging

logger = logging.getLogger(__name__)

DATE_PROPERTY_NAMES: FrozenSet[str] = frozenset({
    "closed_at",
    "committed_at",
    "completed_at",
    "created_at",
    "date",
    "due_on",
    "last_edited_at",
    "last_read_at",
    "merged_at",
    "published_at",
    "pushed_at",
    "starred_at",
    "started_at",
    "submitted_at",
    "timestamp",
    "updated_at",
})


def parse_datetime(value: str) -> datetime:
    """Parse a GitHub timestamp ("2021-01-05T12:00:00Z") into a datetime."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def normalize(value: Any, date_fields: FrozenSet[str] = DATE_PROPERTY_NAMES) -> Any:
    """Return a copy of `value` with known date fields parsed.

    Args:
        value: Any decoded JSON value (dict, list or scalar).
        date_fields: Field names whose string values are parsed.

    Returns:
        A structurally equal value built from fresh dicts and lists. The input
        is never mutated. Unparseable dates stay as strings.
    """
    if isinstance(value, dict):
        result = {}
        for k, v in value.items():
            if k in date_fields and isinstance(v, str):
                try:
                    result[k] = parse_datetime(v)
                except ValueError:
                    logger.warning("Unable to convert %s value %r to a datetime; keeping the string", k, v)
                    result[k] = v
            else:
                result[k] = normalize(v, date_fields)
        return result
    if isinstance(value, list):
        return [normalize(item, date_fields) for item in value]
    return value
