"""Enrichment Orchestrator.

Gets a bookmark into the best shape available before it is posted: fetches
it from Hoarder and, when the AI summary is missing, asks Hoarder for one.
Every remote call is attempted exactly once. On failure the orchestrator
logs and hands back what it has, so a post goes out degraded rather than
never.
"""

import logging

from src.core.bookmark import EnrichedBookmark
from src.core.exceptions import RelayError
from src.core.hoarder_client import HoarderClient

logger = logging.getLogger(__name__)


class EnrichmentOrchestrator:
    """Fetch and summarize bookmarks through the Hoarder API."""

    def __init__(self, hoarder: HoarderClient):
        self.hoarder = hoarder

    async def fetch(self, bookmark_id: str) -> EnrichedBookmark | None:
        """Fetch a bookmark, or None if the store could not provide it."""
        try:
            return await self.hoarder.get_bookmark(bookmark_id)
        except RelayError as e:
            logger.error("Error fetching bookmark %s: %s", bookmark_id, e)
            return None

    async def request_summary(self, bookmark_id: str) -> EnrichedBookmark | None:
        """Ask for a summary; returns the updated bookmark or None on failure."""
        try:
            updated = await self.hoarder.summarize_bookmark(bookmark_id)
        except RelayError as e:
            logger.error("Error requesting summarization for %s: %s", bookmark_id, e)
            return None
        logger.info("Successfully requested summarization for %s", bookmark_id)
        return updated

    async def ensure_summary(self, bookmark: EnrichedBookmark) -> EnrichedBookmark:
        """Return a bookmark with a summary if one can be had.

        Args:
            bookmark: The bookmark as last fetched.

        Returns:
            bookmark itself when it already has a summary; the summarized
            bookmark when the single summarization request yields one;
            otherwise the original bookmark unchanged.
        """
        if bookmark.has_summary:
            return bookmark

        updated = await self.request_summary(bookmark.id)
        if updated is not None and updated.has_summary:
            return updated

        logger.warning(
            "No summary available for %s, publishing without one", bookmark.id
        )
        return bookmark
