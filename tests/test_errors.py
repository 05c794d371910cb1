"""Tests for error classification and formatting."""

import json

import httpx
import pytest

from ghrest.core.errors import (
    NOT_FOUND_HINT,
    ErrorRecord,
    GitHubError,
    GitHubHttpError,
    classify_http_error,
    classify_transport_error,
)


def _response(status: int, content: bytes, headers=None) -> httpx.Response:
    request = httpx.Request("POST", "https://api.github.com/repos/o/r/labels")
    return httpx.Response(status, content=content, headers=headers or {}, request=request)


class TestClassifyHttpError:
    """HTTP failures keep status, GitHub's message, and diagnostics."""

    def test_validation_failed_with_details(self):
        body = {
            "message": "Validation Failed",
            "documentation_url": "https://docs.github.com/rest/reference/issues#create-a-label",
            "details": [
                {"resource": "Label", "field": "name", "code": "already_exists"},
                "color is invalid",
            ],
        }
        record = classify_http_error(
            _response(422, json.dumps(body).encode(), {"X-GitHub-Request-Id": "0400:1F2E"}),
            "Client error '422 Unprocessable Entity'",
        )
        text = record.format()

        assert record.http_status_code == 422
        assert record.http_status_text == "Unprocessable Entity"
        assert record.body_message == "Validation Failed"
        assert record.request_id == "0400:1F2E"
        assert "Validation Failed | https://docs.github.com/rest/reference/issues#create-a-label" in text
        assert "resource=Label, field=name, code=already_exists" in text
        assert "color is invalid" in text
        assert "RequestId: 0400:1F2E" in text
        assert text.splitlines()[0] == "Client error '422 Unprocessable Entity'"

    def test_json_without_message_appends_raw_json(self):
        record = classify_http_error(_response(400, b'["odd", "shape"]'))
        assert record.body_message is None
        assert 'Raw: ["odd", "shape"]' in record.format()

    def test_non_json_body_appends_raw_text(self):
        record = classify_http_error(_response(502, b"<html>Bad gateway</html>"))
        assert "Unable to format error as JSON. Raw: <html>Bad gateway</html>" in record.format()
        assert record.raw_body == "<html>Bad gateway</html>"

    def test_not_found_adds_authentication_hint(self):
        record = classify_http_error(_response(404, b'{"message": "Not Found"}'))
        assert record.format().endswith(NOT_FOUND_HINT)

    def test_other_statuses_have_no_hint(self):
        record = classify_http_error(_response(500, b'{"message": "Server Error"}'))
        assert NOT_FOUND_HINT not in record.format()

    def test_default_transport_message_from_request(self):
        record = classify_http_error(_response(403, b""))
        assert record.transport_message.startswith("POST https://api.github.com/repos/o/r/labels failed with status 403")


class TestClassifyTransportError:
    """Transport failures only carry the transport message."""

    def test_transport_only(self):
        record = classify_transport_error(httpx.ConnectError("Name or service not known"))
        assert record.format() == "Name or service not known"
        assert record.http_status_code is None
        assert record.request_id is None


class TestGitHubError:
    """Exception behaviour."""

    def test_message_is_formatted_record(self):
        record = ErrorRecord(transport_message="boom", http_status_code=500, http_status_text="Internal Server Error")
        err = GitHubHttpError.from_record(record)
        assert str(err) == "boom\n500 | Internal Server Error"
        assert err.status_code == 500
        assert isinstance(err, GitHubError)

    def test_record_is_immutable(self):
        record = ErrorRecord(transport_message="boom")
        with pytest.raises(Exception):
            record.transport_message = "changed"
