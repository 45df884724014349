"""Shared fixtures for metricdeck tests."""

import httpx
import pytest

from tests.helpers import FakeTimer


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def mock_transport():
    """Transport serving a text endpoint, a JSON endpoint and a broken one."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/metrics":
            return httpx.Response(
                200,
                text='# HELP up Whether the target is up\nup{job="api"} 1\nrequests_total 10\n',
                headers={"content-type": "text/plain; version=0.0.4"},
            )
        if request.url.path == "/metrics.json":
            return httpx.Response(
                200,
                json=[{"name": "requests_total", "value": 5, "labels": {"job": "worker"}}],
            )
        if request.url.path == "/bad-json":
            return httpx.Response(
                200,
                text="{not json",
                headers={"content-type": "application/json"},
            )
        return httpx.Response(500, text="boom")

    return httpx.MockTransport(handler)
