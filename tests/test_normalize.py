"""Tests for date normalization of decoded responses."""

import copy
from datetime import datetime, timezone

from ghrest.core.normalize import normalize, parse_datetime

STAMP = "2021-01-05T12:00:00Z"
PARSED = datetime(2021, 1, 5, 12, 0, tzinfo=timezone.utc)


def _nested():
    return {
        "items": [
            {
                "commit": {
                    "author": {"name": "octocat", "created_at": STAMP},
                },
                "title": "2021-01-05T12:00:00Z",
            },
        ],
        "updated_at": STAMP,
    }


def _containers(value):
    """Collect ids of every dict/list in a tree."""
    found = set()
    if isinstance(value, (dict, list)):
        found.add(id(value))
        children = value.values() if isinstance(value, dict) else value
        for child in children:
            found |= _containers(child)
    return found


class TestNormalize:
    """Known date fields become datetimes at any depth."""

    def test_nested_date_fields(self):
        result = normalize(_nested())
        assert result["items"][0]["commit"]["author"]["created_at"] == PARSED
        assert result["updated_at"] == PARSED

    def test_sibling_strings_untouched(self):
        result = normalize(_nested())
        assert result["items"][0]["title"] == STAMP
        assert result["items"][0]["commit"]["author"]["name"] == "octocat"

    def test_input_not_mutated(self):
        original = _nested()
        snapshot = copy.deepcopy(original)
        normalize(original)
        assert original == snapshot

    def test_no_shared_containers(self):
        original = _nested()
        assert not (_containers(original) & _containers(normalize(original)))

    def test_idempotent(self):
        once = normalize(_nested())
        assert normalize(once) == once

    def test_scalars_and_arrays(self):
        assert normalize(42) == 42
        assert normalize(None) is None
        assert normalize("created_at") == "created_at"
        assert normalize([{"closed_at": STAMP}, 3]) == [{"closed_at": PARSED}, 3]

    def test_null_and_non_string_dates_pass_through(self):
        assert normalize({"merged_at": None, "timestamp": 1609848000}) == {"merged_at": None, "timestamp": 1609848000}

    def test_unparseable_date_kept_as_string(self, caplog):
        with caplog.at_level("WARNING", logger="ghrest.core.normalize"):
            assert normalize({"due_on": "someday"}) == {"due_on": "someday"}
        assert "due_on" in caplog.text

    def test_custom_field_set(self):
        result = normalize({"created_at": STAMP, "seen": STAMP}, frozenset({"seen"}))
        assert result == {"created_at": STAMP, "seen": PARSED}


class TestParseDatetime:
    """Timestamp parsing."""

    def test_offsets(self):
        assert parse_datetime("2021-01-05T13:00:00+01:00") == PARSED
        assert parse_datetime(STAMP).tzinfo is not None
