"""Bluesky formatter and publisher.

Formatting happens in two strictly sequential phases:

1. Assemble the post text and truncate it to the 300 character budget.
2. Scan the finished text for URLs and hashtags and record their UTF-8
   byte offsets as rich-text facets.

Facets are never computed on a draft, so truncation cannot leave stale offsets.

Publishing needs a session: createSession exchanges the handle and app
password for an access JWT, which then authorizes createRecord.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

from src.core.bookmark import IntermediatePost, RichTextSpan, SpanKind
from src.core.config import DEFAULT_BLUESKY_API_BASE_URL
from src.core.exceptions import AuthenticationError, RelayError
from src.core.http_client import get_client, request_json
from src.publishers.base import BasePublisher

logger = logging.getLogger(__name__)

BLUESKY_CHAR_LIMIT = 300
MAX_SUMMARY_LENGTH = 170
MAX_BLUESKY_HASHTAGS = 5
ELLIPSIS = "..."

POST_COLLECTION = "app.bsky.feed.post"

URL_PATTERN = re.compile(r"https?://\S+")
HASHTAG_PATTERN = re.compile(r"#(\w+)")


@dataclass(frozen=True)
class BlueskyPost:
    """Final post text plus the spans computed on exactly that text."""

    text: str
    spans: tuple[RichTextSpan, ...] = ()

    @property
    def facets(self) -> list[dict[str, Any]]:
        return [span.to_facet() for span in self.spans]


def _truncate(text: str, limit: int) -> str:
    """Cut text to at most limit characters, ending in an ellipsis if cut."""
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def _byte_offset(text: str, index: int) -> int:
    return len(text[:index].encode("utf-8"))


def find_spans(text: str) -> tuple[RichTextSpan, ...]:
    """Find link and hashtag spans in a final post text.

    Links come first, then hashtags, each in order of appearance. Offsets
    are UTF-8 byte positions, as the AT Protocol requires.
    """
    spans = []
    for match in URL_PATTERN.finditer(text):
        spans.append(
            RichTextSpan(
                byte_start=_byte_offset(text, match.start()),
                byte_end=_byte_offset(text, match.end()),
                kind=SpanKind.LINK,
                value=match.group(0),
            )
        )
    for match in HASHTAG_PATTERN.finditer(text):
        spans.append(
            RichTextSpan(
                byte_start=_byte_offset(text, match.start()),
                byte_end=_byte_offset(text, match.end()),
                kind=SpanKind.TAG,
                value=match.group(1),
            )
        )
    return tuple(spans)


def format_bluesky_text(post: IntermediatePost) -> str:
    """Pack phrase, title, URL, summary and hashtags into 300 characters.

    Summary and hashtags are added only while room remains; the final clamp
    is what guarantees the limit.
    """
    summary = _truncate(post.summary, MAX_SUMMARY_LENGTH)
    hashtags = " ".join(post.hashtag_list()[:MAX_BLUESKY_HASHTAGS])

    if post.title:
        text = f'{post.engaging_phrase} "{post.title}"\n{post.url}'
    else:
        text = f"{post.engaging_phrase} {post.url}"

    remaining = BLUESKY_CHAR_LIMIT - len(text)
    if remaining > 4:
        text += "\n\n" + summary[: remaining - 4]

        remaining = BLUESKY_CHAR_LIMIT - len(text)
        if remaining > 2:
            text += "\n\n" + hashtags[: remaining - 2]

    return _truncate(text, BLUESKY_CHAR_LIMIT)


def format_bluesky_post(post: IntermediatePost) -> BlueskyPost:
    """Format a post for Bluesky: final text first, spans second."""
    text = format_bluesky_text(post)
    return BlueskyPost(text=text, spans=find_spans(text))


@dataclass
class BlueskySession:
    """Session returned by com.atproto.server.createSession."""

    access_jwt: str
    did: str


def _utc_timestamp(moment: datetime | None = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class BlueskyPublisher(BasePublisher):
    """Publishes posts to Bluesky via the XRPC API."""

    platform = "bluesky"

    def __init__(
        self,
        username: str,
        password: str,
        base_url: str = DEFAULT_BLUESKY_API_BASE_URL,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the publisher.

        Args:
            username: Bluesky handle or DID
            password: App password
            base_url: XRPC base URL of the PDS
            client: Optional httpx client; the shared client is used otherwise
        """
        self.username = username
        self._password = password
        self.base_url = base_url.rstrip("/")
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self._password)

    async def _http(self) -> httpx.AsyncClient:
        return self._client or await get_client()

    async def authenticate(self) -> BlueskySession:
        """Exchange credentials for an access token.

        Raises:
            AuthenticationError: If the exchange fails or returns no token.
        """
        logger.info("Authenticating with Bluesky")
        try:
            data = await request_json(
                await self._http(),
                "POST",
                f"{self.base_url}/com.atproto.server.createSession",
                service="Bluesky",
                json={"identifier": self.username, "password": self._password},
            )
        except RelayError as e:
            raise AuthenticationError(
                f"Failed to authenticate with Bluesky: {e}",
                service="Bluesky",
                status_code=getattr(e, "status_code", None),
            ) from e

        if not isinstance(data, dict) or not data.get("accessJwt"):
            raise AuthenticationError(
                "Failed to authenticate with Bluesky: no access token in response",
                service="Bluesky",
            )

        logger.info("Successfully authenticated with Bluesky")
        return BlueskySession(access_jwt=data["accessJwt"], did=data.get("did", ""))

    def build_record(
        self, formatted: BlueskyPost, created_at: datetime | None = None
    ) -> dict[str, Any]:
        """Build the app.bsky.feed.post record; facets only when there are any."""
        record: dict[str, Any] = {
            "text": formatted.text,
            "createdAt": _utc_timestamp(created_at),
            "$type": POST_COLLECTION,
        }
        if formatted.spans:
            record["facets"] = formatted.facets
        return record

    async def publish(self, post: IntermediatePost) -> dict[str, Any]:
        """Authenticate, format and create the post record.

        Raises:
            AuthenticationError: If the session exchange fails.
            RemoteCallError: If createRecord fails.
        """
        session = await self.authenticate()

        formatted = format_bluesky_post(post)
        logger.info(
            "Formatted Bluesky post (%d/%d chars)",
            len(formatted.text),
            BLUESKY_CHAR_LIMIT,
            extra={"text": formatted.text},
        )

        if post.image_url:
            logger.info("Image sharing on Bluesky is not supported. Posting without image.")

        result = await request_json(
            await self._http(),
            "POST",
            f"{self.base_url}/com.atproto.repo.createRecord",
            service="Bluesky",
            headers={"Authorization": f"Bearer {session.access_jwt}"},
            json={
                "repo": session.did,
                "collection": POST_COLLECTION,
                "record": self.build_record(formatted),
            },
        )
        logger.info("Successfully posted to Bluesky", extra={"result": result})
        return result
