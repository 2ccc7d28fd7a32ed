"""Pytest fixtures for directus-migrate tests."""

import json
from collections import Counter
from typing import Callable, Union

import httpx
import pytest

BASE_URL = "https://base.example.com"
TARGET_URL = "https://target.example.com"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class StubDirectus:
    """
    Fake Directus instances behind one httpx.MockTransport.
    Routes are keyed by (host, path); every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []
        self.calls: Counter[tuple[str, str]] = Counter()
        self.transport = httpx.MockTransport(self._handle)

    def route(self, url: str, path: str, response: Route) -> None:
        self.routes[(httpx.URL(url).host, path)] = response

    def count(self, url: str, path: str) -> int:
        return self.calls[(httpx.URL(url).host, path)]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport)

    def last_json(self) -> object:
        return json.loads(self.requests[-1].content)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        key = (request.url.host, request.url.path)
        self.requests.append(request)
        self.calls[key] += 1
        response = self.routes.get(key)
        if response is None:
            return httpx.Response(404, json={"errors": [{"message": "Route not found"}]})
        if callable(response):
            return response(request)
        return response


@pytest.fixture
def stub() -> StubDirectus:
    """Fresh stub instances for each test."""
    return StubDirectus()


@pytest.fixture
def sample_snapshot() -> dict:
    """Minimal Directus snapshot document."""
    return {
        "version": 1,
        "directus": "10.8.3",
        "vendor": "postgres",
        "collections": [{"collection": "articles", "meta": {"icon": "article"}}],
        "fields": [
            {"collection": "articles", "field": "id", "type": "integer"},
            {"collection": "articles", "field": "title", "type": "string"},
        ],
        "relations": [],
    }


@pytest.fixture
def sample_diff() -> dict:
    """Diff document as returned by /schema/diff."""
    return {
        "hash": "6c3f6d1b0e5a",
        "diff": {
            "collections": [],
            "fields": [{"collection": "articles", "field": "title", "diff": [{"kind": "N"}]}],
            "relations": [],
        },
        "changes": [{"kind": "N", "path": ["articles", "title"]}],
    }


@pytest.fixture
def happy_stub(stub: StubDirectus, sample_snapshot: dict, sample_diff: dict) -> StubDirectus:
    """Base serves a snapshot; target serves a diff and accepts apply."""
    stub.route(BASE_URL, "/schema/snapshot", httpx.Response(200, json={"data": sample_snapshot}))
    stub.route(TARGET_URL, "/schema/diff", httpx.Response(200, json={"data": sample_diff}))
    stub.route(TARGET_URL, "/schema/apply", httpx.Response(204))
    return stub
