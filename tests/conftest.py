"""Shared test fixtures for Hoarder Social Relay.

Provides bookmark and post factories plus helpers for stubbing the remote
services with httpx.MockTransport, so no test touches the network.
"""

import json
import random
from typing import Any, Callable

import httpx
import pytest

from src.core.bookmark import EnrichedBookmark, IntermediatePost, Tag
from src.core.config import reset_config

ENV_VARS = (
    "HOARDER_API_BASE_URL",
    "HOARDER_API_TOKEN",
    "BLUESKY_USERNAME",
    "BLUESKY_PASSWORD",
    "BLUESKY_API_BASE_URL",
    "LINKEDIN_ACCESS_TOKEN",
    "LINKEDIN_USER_URN",
    "LINKEDIN_API_URL",
    "PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Remove relay environment variables and reset the config singleton."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def bookmark_payload(
    bookmark_id: str = "b1",
    *,
    url: str = "https://example.com/article",
    title: str | None = "A Great Article",
    summary: str | None = "Short text.",
    image_url: str | None = None,
    tags: list[str] | None = None,
) -> dict[str, Any]:
    """Build a Hoarder API bookmark payload."""
    return {
        "id": bookmark_id,
        "content": {"type": "link", "url": url, "title": title, "imageUrl": image_url},
        "summary": summary,
        "tags": [{"id": f"t{i}", "name": name} for i, name in enumerate(tags or [])],
    }


@pytest.fixture
def make_bookmark() -> Callable[..., EnrichedBookmark]:
    """Factory for EnrichedBookmark instances."""

    def _make(
        bookmark_id: str = "b1",
        *,
        url: str = "https://example.com/article",
        title: str | None = "A Great Article",
        summary: str | None = "Short text.",
        image_url: str | None = None,
        tags: list[str] | None = None,
    ) -> EnrichedBookmark:
        return EnrichedBookmark(
            id=bookmark_id,
            url=url,
            title=title,
            summary=summary,
            image_url=image_url,
            tags=[Tag(name=name) for name in tags or []],
        )

    return _make


@pytest.fixture
def make_post() -> Callable[..., IntermediatePost]:
    """Factory for IntermediatePost instances."""

    def _make(
        *,
        title: str = "A Great Article",
        url: str = "https://example.com/article",
        summary: str = "Short text.",
        hashtags: str = "#tech #ai",
        engaging_phrase: str = "📚 Bookmarked this gem for later:",
        image_url: str | None = None,
    ) -> IntermediatePost:
        return IntermediatePost(
            title=title,
            url=url,
            summary=summary,
            hashtags=hashtags,
            engaging_phrase=engaging_phrase,
            image_url=image_url,
        )

    return _make


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


class RecordingTransport:
    """Routes requests to canned responses and records every request.

    routes maps (method, path) to a response, or to a callable taking the
    request and returning one. Unknown routes answer 404.
    """

    def __init__(self, routes: dict[tuple[str, str], Any] | None = None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(handler):
            return handler(request)
        # Fresh copy so a canned response can be served more than once
        return httpx.Response(
            handler.status_code, headers=handler.headers, content=handler.content
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def transport() -> RecordingTransport:
    """A fresh RecordingTransport; add routes via transport.routes."""
    return RecordingTransport()


@pytest.fixture
def hoarder_payload() -> Callable[..., dict[str, Any]]:
    """Factory for Hoarder API bookmark payloads."""
    return bookmark_payload
