"""Shared fixtures for the ghrest test suite."""

import json
from typing import Callable, List

import httpx
import pytest

from ghrest.core.config import Settings
from ghrest.core.rest import RestClient


@pytest.fixture
def settings() -> Settings:
    """Settings with fast retries and no ambient token."""
    return Settings(
        api_host_name="github.com",
        access_token=None,
        retry_delay_seconds=0.01,
        max_retries=3,
        state_change_delay_seconds=0,
        multi_request_progress_threshold=10,
    )


def json_response(status: int, body, headers=None) -> httpx.Response:
    h = {"Content-Type": "application/json; charset=utf-8"}
    h.update(headers or {})
    return httpx.Response(status, content=json.dumps(body).encode("utf-8"), headers=h)


class Recorder:
    """MockTransport handler replaying canned responses and recording requests."""

    def __init__(self, responses: List[httpx.Response] | Callable[[httpx.Request], httpx.Response]):
        self.responses = responses
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self.responses):
            return self.responses(request)
        return self.responses.pop(0)


@pytest.fixture
def make_client(settings):
    """Build a RestClient whose transport replays the given responses."""

    def _make(responses, **kwargs):
        recorder = Recorder(responses)
        client = RestClient(kwargs.pop("settings", settings), transport=httpx.MockTransport(recorder), **kwargs)
        return client, recorder

    return _make
