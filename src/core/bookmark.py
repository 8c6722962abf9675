"""Bookmark data model for Hoarder Social Relay.

This module defines the core data structures used throughout the relay:
- LifecycleStatus: Where a tracked bookmark is between creation and publication
- WebhookOperation: Operations the Hoarder webhook reports
- EnrichedBookmark: Bookmark data fetched from the Hoarder API
- IntermediatePost: Platform-neutral post built from an enriched bookmark
- RichTextSpan: Byte-offset annotation over a final rendered post text
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from src.core.exceptions import ParseError


class LifecycleStatus(str, Enum):
    """Lifecycle state of a tracked bookmark.

    A bookmark is tracked from its "created" event until a publish attempt
    finishes; there is no status for published bookmarks because they are
    no longer tracked.
    """

    CREATED = "created"
    SUMMARIZING = "summarizing"
    SUMMARIZED = "summarized"


class WebhookOperation(str, Enum):
    """Operations the relay reacts to; any other value is ignored."""

    CREATED = "created"
    CRAWLED = "crawled"
    AI_TAGGED = "ai tagged"

    @classmethod
    def parse(cls, value: Any) -> Optional["WebhookOperation"]:
        """Return the matching operation, or None if unrecognised."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class Tag:
    """A bookmark tag as named in Hoarder."""

    name: str


def _optional_str(value: Any) -> Optional[str]:
    """Non-empty strings pass through; anything else counts as missing."""
    return value if isinstance(value, str) and value else None


@dataclass
class EnrichedBookmark:
    """Represents a bookmark as returned by the Hoarder API.

    Required fields:
        id: Hoarder bookmark ID
        url: Canonical URL of the bookmarked page

    Optional fields are filled in by crawling (title, image) and
    AI enrichment (summary, tags) and may be missing early in the lifecycle.
    """

    id: str
    url: str
    title: Optional[str] = None
    summary: Optional[str] = None
    image_url: Optional[str] = None
    tags: list[Tag] = field(default_factory=list)

    @property
    def has_summary(self) -> bool:
        """True when the AI summary is present and non-empty."""
        return bool(self.summary)

    @classmethod
    def from_api(cls, data: dict[str, Any], bookmark_id: str = "") -> "EnrichedBookmark":
        """Build a bookmark from a Hoarder API bookmark payload.

        Args:
            data: Decoded JSON of GET /bookmarks/{id} or POST .../summarize.
            bookmark_id: Fallback ID when the payload has none.

        Raises:
            ParseError: If the payload is not an object or has no content.url.
        """
        if not isinstance(data, dict):
            raise ParseError("Bookmark payload must be a JSON object")

        content = data.get("content") or {}
        if not isinstance(content, dict):
            raise ParseError(
                f"Bookmark {data.get('id') or bookmark_id} has malformed content"
            )

        url = content.get("url")
        if not url or not isinstance(url, str):
            raise ParseError(
                f"Bookmark {data.get('id') or bookmark_id} has no content.url"
            )

        # Empty names are kept and render as a bare "#"
        raw_tags = data.get("tags")
        tags = [
            Tag(name=tag["name"])
            for tag in (raw_tags if isinstance(raw_tags, list) else [])
            if isinstance(tag, dict) and isinstance(tag.get("name"), str)
        ]

        return cls(
            id=str(data.get("id") or bookmark_id),
            url=url,
            title=_optional_str(content.get("title")),
            summary=_optional_str(data.get("summary")),
            image_url=_optional_str(content.get("imageUrl")),
            tags=tags,
        )


@dataclass(frozen=True)
class IntermediatePost:
    """Platform-neutral post, built once per publish and shared by all formatters.

    Attributes:
        title: Bookmark title, empty when unknown
        url: Bookmark URL
        summary: Cleaned summary text
        hashtags: Space-joined "#tag" string
        engaging_phrase: Lead-in phrase picked for this post
        image_url: Preview image URL (not uploaded anywhere)
    """

    title: str
    url: str
    summary: str
    hashtags: str
    engaging_phrase: str
    image_url: Optional[str] = None

    @property
    def default_text(self) -> str:
        """Generic rendering of the post, used for logging."""
        return f"{self.engaging_phrase} {self.url}\n\n{self.summary}\n\n{self.hashtags}"

    def hashtag_list(self) -> list[str]:
        """Hashtags split on whitespace, order preserved."""
        return self.hashtags.split()


class SpanKind(str, Enum):
    """Kind of rich-text annotation."""

    LINK = "link"
    TAG = "tag"


@dataclass(frozen=True)
class RichTextSpan:
    """Annotation over [byte_start, byte_end) of a UTF-8 encoded text.

    value holds the URI for links and the tag name (without '#') for tags.
    """

    byte_start: int
    byte_end: int
    kind: SpanKind
    value: str

    def to_facet(self) -> dict[str, Any]:
        """Render as an app.bsky.richtext.facet record."""
        if self.kind is SpanKind.LINK:
            feature = {"$type": "app.bsky.richtext.facet#link", "uri": self.value}
        else:
            feature = {"$type": "app.bsky.richtext.facet#tag", "tag": self.value}
        return {
            "index": {"byteStart": self.byte_start, "byteEnd": self.byte_end},
            "features": [feature],
        }
