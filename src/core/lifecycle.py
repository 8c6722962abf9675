"""Lifecycle Tracker for Hoarder Social Relay.

Tracks bookmarks between their "created" webhook and the publish attempt
triggered by "ai tagged". State lives in memory only; a restart forgets
every in-flight bookmark.

Transitions:
    created                      -> CREATED (always, overwrites)
    crawled,   no summary        -> SUMMARIZING, request summarization
    crawled,   summary present   -> SUMMARIZED
    ai tagged, no summary        -> summarize (best effort), then publish
    ai tagged, summary present   -> publish
    publish attempt finished     -> entry removed
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator

from src.core.bookmark import EnrichedBookmark, LifecycleStatus

logger = logging.getLogger(__name__)


class LifecycleAction(str, Enum):
    """What the caller has to do after a transition."""

    NONE = "none"
    REQUEST_SUMMARY = "request_summary"
    SUMMARIZE_THEN_PUBLISH = "summarize_then_publish"
    PUBLISH = "publish"


class LifecycleTracker:
    """In-memory map of bookmark ID to LifecycleStatus.

    An ID is present if and only if its lifecycle is unfinished. All methods
    are meant to be called from the event loop thread; use lock_for() to
    make a fetch-decide-write sequence for one bookmark atomic.
    """

    def __init__(self) -> None:
        self._statuses: dict[str, LifecycleStatus] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def __contains__(self, bookmark_id: object) -> bool:
        return bookmark_id in self._statuses

    def __len__(self) -> int:
        return len(self._statuses)

    def is_tracked(self, bookmark_id: str) -> bool:
        return bookmark_id in self._statuses

    def get_status(self, bookmark_id: str) -> LifecycleStatus | None:
        return self._statuses.get(bookmark_id)

    def snapshot(self) -> dict[str, LifecycleStatus]:
        """Copy of the current map."""
        return dict(self._statuses)

    def on_created(self, bookmark_id: str) -> None:
        """Start tracking a bookmark, restarting any earlier lifecycle."""
        previous = self._statuses.get(bookmark_id)
        self._statuses[bookmark_id] = LifecycleStatus.CREATED
        if previous is not None:
            logger.info(
                "Bookmark %s re-created (was %s)", bookmark_id, previous.value
            )

    def on_crawled(self, bookmark_id: str, bookmark: EnrichedBookmark) -> LifecycleAction:
        """Advance a crawled bookmark.

        Args:
            bookmark_id: The tracked bookmark.
            bookmark: Freshly fetched bookmark data.

        Returns:
            REQUEST_SUMMARY when the bookmark still lacks a summary, NONE otherwise
            (including when the bookmark is not tracked).
        """
        if bookmark_id not in self._statuses:
            return LifecycleAction.NONE

        if not bookmark.has_summary:
            self._statuses[bookmark_id] = LifecycleStatus.SUMMARIZING
            return LifecycleAction.REQUEST_SUMMARY

        self._statuses[bookmark_id] = LifecycleStatus.SUMMARIZED
        return LifecycleAction.NONE

    def on_tagged(self, bookmark_id: str, bookmark: EnrichedBookmark) -> LifecycleAction:
        """Decide how to publish an AI-tagged bookmark.

        The status is left as-is; call finish() once the publish attempt is over.
        """
        if bookmark_id not in self._statuses:
            return LifecycleAction.NONE

        if not bookmark.has_summary:
            return LifecycleAction.SUMMARIZE_THEN_PUBLISH
        return LifecycleAction.PUBLISH

    def finish(self, bookmark_id: str) -> None:
        """Stop tracking a bookmark after its publish attempt."""
        self._statuses.pop(bookmark_id, None)

    @asynccontextmanager
    async def lock_for(self, bookmark_id: str) -> AsyncIterator[None]:
        """Serialize event handling for one bookmark.

        Events for different bookmarks never wait on each other. The lock is
        discarded once nobody holds or waits on it.
        """
        lock = self._locks.get(bookmark_id)
        if lock is None:
            lock = self._locks[bookmark_id] = asyncio.Lock()
        self._lock_users[bookmark_id] = self._lock_users.get(bookmark_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[bookmark_id] -= 1
            if self._lock_users[bookmark_id] == 0:
                del self._lock_users[bookmark_id]
                del self._locks[bookmark_id]

    def active_locks(self) -> int:
        """Number of bookmarks with an event currently held or queued."""
        return len(self._locks)
