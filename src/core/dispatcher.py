"""Publication Dispatcher.

Fans an IntermediatePost out to every publisher and collects one result per
platform. Platforms are independent: an unconfigured platform is skipped
without any network call, and a failing platform is logged and recorded as
None without affecting the others.
"""

import asyncio
import logging
from typing import Any, Iterable

from src.core.bookmark import IntermediatePost
from src.core.config import Config
from src.publishers.base import BasePublisher
from src.publishers.bluesky import BlueskyPublisher
from src.publishers.linkedin import LinkedInPublisher

logger = logging.getLogger(__name__)

PublishResults = dict[str, dict[str, Any] | None]


class PublicationDispatcher:
    """Publish to all platforms concurrently, tolerating partial failure."""

    def __init__(self, publishers: Iterable[BasePublisher]):
        self.publishers = list(publishers)

    @classmethod
    def from_config(cls, config: Config) -> "PublicationDispatcher":
        """Create Bluesky and LinkedIn publishers from configuration."""
        return cls(
            [
                BlueskyPublisher(
                    username=config.bluesky_username,
                    password=config.bluesky_password,
                    base_url=config.bluesky_api_base_url,
                ),
                LinkedInPublisher(
                    access_token=config.linkedin_access_token,
                    user_urn=config.linkedin_user_urn,
                    api_url=config.linkedin_api_url,
                ),
            ]
        )

    @property
    def platforms(self) -> list[str]:
        return [publisher.platform for publisher in self.publishers]

    async def _publish_one(
        self, publisher: BasePublisher, post: IntermediatePost
    ) -> dict[str, Any] | None:
        logger.info("Posting to %s", publisher.platform)
        try:
            return await publisher.publish(post)
        except Exception as e:
            logger.error("Error posting to %s: %s", publisher.platform, e)
            return None

    async def publish(self, post: IntermediatePost) -> PublishResults:
        """Publish a post everywhere it is configured.

        Returns:
            Mapping of every platform name to its response, or None when the
            platform is not configured or the attempt failed.
        """
        logger.info("Posting to social media", extra={"text": post.default_text})

        results: PublishResults = {publisher.platform: None for publisher in self.publishers}
        active = []
        for publisher in self.publishers:
            if publisher.is_configured:
                active.append(publisher)
            else:
                logger.info("%s posting is not configured", publisher.platform)

        outcomes = await asyncio.gather(
            *(self._publish_one(publisher, post) for publisher in active)
        )
        for publisher, outcome in zip(active, outcomes):
            results[publisher.platform] = outcome

        return results
