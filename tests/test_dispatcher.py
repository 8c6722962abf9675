"""Tests for the Publication Dispatcher."""

import asyncio
from typing import Any

import httpx
import pytest

from src.core.config import Config
from src.core.dispatcher import PublicationDispatcher
from src.core.exceptions import AuthenticationError, RemoteCallError
from src.publishers.base import BasePublisher
from src.publishers.bluesky import BlueskyPublisher
from src.publishers.linkedin import LinkedInPublisher


class FakePublisher(BasePublisher):
    def __init__(self, platform: str, *, configured: bool = True, result=None, error=None):
        self.platform = platform
        self._configured = configured
        self._result = result if result is not None else {"platform": platform}
        self._error = error
        self.posts: list = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def publish(self, post) -> dict[str, Any]:
        self.posts.append(post)
        await asyncio.sleep(0)
        if self._error is not None:
            raise self._error
        return self._result


class TestPublish:
    @pytest.mark.asyncio
    async def test_all_platforms_succeed(self, make_post):
        bluesky, linkedin = FakePublisher("bluesky"), FakePublisher("linkedin")
        post = make_post()

        results = await PublicationDispatcher([bluesky, linkedin]).publish(post)

        assert results == {"bluesky": {"platform": "bluesky"}, "linkedin": {"platform": "linkedin"}}
        assert bluesky.posts == [post]
        assert linkedin.posts == [post]

    @pytest.mark.asyncio
    async def test_unconfigured_platform_is_none_and_not_called(self, make_post):
        bluesky = FakePublisher("bluesky", configured=False)
        linkedin = FakePublisher("linkedin", result={"id": "urn:li:share:9"})

        results = await PublicationDispatcher([bluesky, linkedin]).publish(make_post())

        assert results == {"bluesky": None, "linkedin": {"id": "urn:li:share:9"}}
        assert bluesky.posts == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            AuthenticationError("bad password"),
            RemoteCallError("500", status_code=500),
            RuntimeError("unexpected"),
        ],
    )
    async def test_failure_is_isolated(self, make_post, error):
        bluesky = FakePublisher("bluesky", error=error)
        linkedin = FakePublisher("linkedin")

        results = await PublicationDispatcher([bluesky, linkedin]).publish(make_post())

        assert results["bluesky"] is None
        assert results["linkedin"] == {"platform": "linkedin"}

    @pytest.mark.asyncio
    async def test_nothing_configured(self, make_post):
        publishers = [FakePublisher("bluesky", configured=False), FakePublisher("linkedin", configured=False)]
        results = await PublicationDispatcher(publishers).publish(make_post())
        assert results == {"bluesky": None, "linkedin": None}


class TestFromConfig:
    def test_builds_both_publishers(self):
        config = Config(
            bluesky_username="me",
            bluesky_password="pw",
            linkedin_access_token="",
            linkedin_user_urn="",
        )

        dispatcher = PublicationDispatcher.from_config(config)

        assert dispatcher.platforms == ["bluesky", "linkedin"]
        bluesky, linkedin = dispatcher.publishers
        assert isinstance(bluesky, BlueskyPublisher) and bluesky.is_configured
        assert isinstance(linkedin, LinkedInPublisher) and not linkedin.is_configured


class TestNetworkIsolation:
    @pytest.mark.asyncio
    async def test_no_bluesky_request_without_credentials(self, transport, make_post):
        transport.routes[("POST", "/v2/ugcPosts")] = httpx.Response(201, json={"id": "urn:li:share:1"})
        client = transport.client()
        dispatcher = PublicationDispatcher(
            [
                BlueskyPublisher("", "", base_url="https://bsky.test/xrpc", client=client),
                LinkedInPublisher("tok", "urn", api_url="https://li.test/v2/ugcPosts", client=client),
            ]
        )

        results = await dispatcher.publish(make_post())

        assert results == {"bluesky": None, "linkedin": {"id": "urn:li:share:1"}}
        assert [r.url.host for r in transport.requests] == ["li.test"]
