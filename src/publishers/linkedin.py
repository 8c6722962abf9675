"""LinkedIn formatter and publisher.

LinkedIn gets the long form: phrase, quoted title, link, the full cleaned
summary and up to ten hashtags. No length cap and no rich-text annotations.
Authentication is a static member access token; there is no handshake.
"""

import logging
from typing import Any

import httpx

from src.core.bookmark import IntermediatePost
from src.core.config import DEFAULT_LINKEDIN_API_URL
from src.core.http_client import get_client, request_json
from src.publishers.base import BasePublisher

logger = logging.getLogger(__name__)

MAX_LINKEDIN_HASHTAGS = 10
LINKEDIN_VERSION = "202210"
RESTLI_PROTOCOL_VERSION = "2.0.0"


def format_linkedin_text(post: IntermediatePost) -> str:
    """Render the LinkedIn commentary for a post."""
    parts = [post.engaging_phrase]
    if post.title:
        parts.append(f'"{post.title}"')
    parts.append(f"🔗 {post.url}")
    parts.append(post.summary)
    parts.append(" ".join(post.hashtag_list()[:MAX_LINKEDIN_HASHTAGS]))
    return "\n\n".join(parts)


class LinkedInPublisher(BasePublisher):
    """Publishes posts as LinkedIn UGC shares."""

    platform = "linkedin"

    def __init__(
        self,
        access_token: str,
        user_urn: str,
        api_url: str = DEFAULT_LINKEDIN_API_URL,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the publisher.

        Args:
            access_token: OAuth member token with w_member_social scope
            user_urn: Member ID (the part after urn:li:person:)
            api_url: UGC posts endpoint
            client: Optional httpx client; the shared client is used otherwise
        """
        self._access_token = access_token
        self.user_urn = user_urn
        self.api_url = api_url
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._access_token and self.user_urn)

    def build_payload(self, text: str) -> dict[str, Any]:
        return {
            "author": f"urn:li:person:{self.user_urn}",
            "lifecycleState": "PUBLISHED",
            "specificContent": {
                "com.linkedin.ugc.ShareContent": {
                    "shareCommentary": {"text": text},
                    "shareMediaCategory": "NONE",
                }
            },
            "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
        }

    async def publish(self, post: IntermediatePost) -> dict[str, Any]:
        """Format and submit the share.

        Raises:
            RemoteCallError: If the API call fails.
        """
        text = format_linkedin_text(post)

        if post.image_url:
            logger.info("Image sharing on LinkedIn is not supported. Posting without image.")

        client = self._client or await get_client()
        result = await request_json(
            client,
            "POST",
            self.api_url,
            service="LinkedIn",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._access_token}",
                "LinkedIn-Version": LINKEDIN_VERSION,
                "X-Restli-Protocol-Version": RESTLI_PROTOCOL_VERSION,
            },
            json=self.build_payload(text),
        )
        logger.info("Successfully posted to LinkedIn", extra={"result": result})
        return result
