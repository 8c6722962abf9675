"""Post Composer.

Turns an enriched bookmark into the platform-neutral IntermediatePost that
every formatter consumes: cleans the AI summary, renders hashtags and picks
the lead-in phrase.
"""

import re
from typing import Iterable

from src.core.bookmark import EnrichedBookmark, IntermediatePost, Tag
from src.core.phrases import RandomSource, pick_engaging_phrase

NO_SUMMARY_TEXT = "No summary available"

# Applied in order: the preamble is often wrapped in the bold markers
# that the third pattern removes.
_SUMMARY_MARKER = re.compile(r"\*\*Summary:\*\*", re.IGNORECASE)
_AI_PREAMBLE = re.compile(
    re.escape(
        "Here's a summary of the provided content, adhering to all the specified rules:"
    ),
    re.IGNORECASE,
)
_BOLD = re.compile(r"\*\*")
_WHITESPACE = re.compile(r"\s+")


def _clean_once(text: str) -> str:
    text = _SUMMARY_MARKER.sub("", text)
    text = _AI_PREAMBLE.sub("", text)
    text = _BOLD.sub("", text)
    return text.strip()


def clean_summary(text: str) -> str:
    """Strip markdown bold and known AI boilerplate from a summary.

    Passes repeat until nothing changes, since dropping "**" can splice a
    new preamble together. Every pass only removes characters, so this
    terminates, and already-clean text is returned unchanged.
    """
    cleaned = _clean_once(text)
    while cleaned != text:
        text = cleaned
        cleaned = _clean_once(text)
    return cleaned


def format_hashtags(tags: Iterable[Tag | str]) -> str:
    """Render tags as "#tag" words joined by single spaces.

    Whitespace inside a tag name is removed ("machine learning" becomes
    "#machinelearning"). No tags gives an empty string.
    """
    hashtags = []
    for tag in tags:
        name = tag.name if isinstance(tag, Tag) else tag
        hashtags.append("#" + _WHITESPACE.sub("", name))
    return " ".join(hashtags)


def compose(
    bookmark: EnrichedBookmark,
    rng: RandomSource | None = None,
) -> IntermediatePost:
    """Build the intermediate post for a bookmark.

    Args:
        bookmark: The bookmark, after enrichment.
        rng: Random source for the phrase pick (module random by default).

    Returns:
        A fresh IntermediatePost.
    """
    return IntermediatePost(
        title=bookmark.title or "",
        url=bookmark.url,
        summary=clean_summary(bookmark.summary or NO_SUMMARY_TEXT),
        hashtags=format_hashtags(bookmark.tags),
        engaging_phrase=pick_engaging_phrase(rng),
        image_url=bookmark.image_url,
    )
