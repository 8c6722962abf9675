"""Webhook relay for Hoarder Social Relay.

Integrates all components to handle one webhook event end-to-end:
lifecycle tracker → enrichment → composer → dispatcher

Within an event every remote call is sequential. Events for the same
bookmark are serialized through the tracker's per-bookmark lock, so a
duplicate "ai tagged" delivery arriving after a publish finds the bookmark
no longer tracked and does nothing.
"""

from dataclasses import dataclass, field

from src.core.bookmark import WebhookOperation
from src.core.composer import compose
from src.core.dispatcher import PublicationDispatcher, PublishResults
from src.core.enrichment import EnrichmentOrchestrator
from src.core.lifecycle import LifecycleAction, LifecycleTracker
from src.core.logger import EventLoggerAdapter, get_event_logger
from src.core.phrases import RandomSource


@dataclass
class EventOutcome:
    """What handling one webhook event did.

    Attributes:
        bookmark_id: The bookmark the event refers to
        operation: The raw operation string from the webhook
        action: Lifecycle action taken (NONE when nothing happened)
        published: Whether a publish attempt was made
        results: Per-platform publish results when published
    """

    bookmark_id: str
    operation: str
    action: LifecycleAction = LifecycleAction.NONE
    published: bool = False
    results: PublishResults = field(default_factory=dict)


class WebhookRelay:
    """Handles Hoarder webhook events.

    Orchestrates the bookmark lifecycle:
    1. "created": start tracking
    2. "crawled": fetch; request a summary if there is none yet
    3. "ai tagged": fetch; make sure there is a summary (best effort),
       compose, publish, stop tracking
    """

    def __init__(
        self,
        tracker: LifecycleTracker,
        enrichment: EnrichmentOrchestrator,
        dispatcher: PublicationDispatcher,
        rng: RandomSource | None = None,
    ):
        self.tracker = tracker
        self.enrichment = enrichment
        self.dispatcher = dispatcher
        self._rng = rng

    async def handle_event(self, bookmark_id: str, operation: str) -> EventOutcome:
        """Handle one webhook event.

        Args:
            bookmark_id: Hoarder bookmark ID from the webhook body
            operation: Operation string from the webhook body

        Returns:
            EventOutcome describing what was done.
        """
        outcome = EventOutcome(bookmark_id=bookmark_id, operation=operation)
        log = get_event_logger(__name__, bookmark_id, operation)

        op = WebhookOperation.parse(operation)
        if op is None:
            log.info("Ignoring unhandled operation: %s", operation)
            return outcome

        async with self.tracker.lock_for(bookmark_id):
            if op is WebhookOperation.CREATED:
                self.tracker.on_created(bookmark_id)
                log.info("Bookmark %s created and being tracked", bookmark_id)
            elif op is WebhookOperation.CRAWLED:
                await self._on_crawled(outcome, log)
            else:
                await self._on_tagged(outcome, log)

        return outcome

    async def _on_crawled(self, outcome: EventOutcome, log: EventLoggerAdapter) -> None:
        bookmark_id = outcome.bookmark_id
        if not self.tracker.is_tracked(bookmark_id):
            log.debug("Bookmark %s is not tracked, ignoring", bookmark_id)
            return

        bookmark = await self.enrichment.fetch(bookmark_id)
        if bookmark is None:
            return

        outcome.action = self.tracker.on_crawled(bookmark_id, bookmark)
        if outcome.action is LifecycleAction.REQUEST_SUMMARY:
            await self.enrichment.request_summary(bookmark_id)
            log.info("Requested summarization for %s", bookmark_id)
        else:
            log.info("Bookmark %s already has a summary", bookmark_id)

    async def _on_tagged(self, outcome: EventOutcome, log: EventLoggerAdapter) -> None:
        bookmark_id = outcome.bookmark_id
        if not self.tracker.is_tracked(bookmark_id):
            log.debug("Bookmark %s is not tracked, ignoring", bookmark_id)
            return

        bookmark = await self.enrichment.fetch(bookmark_id)
        if bookmark is None:
            return

        outcome.action = self.tracker.on_tagged(bookmark_id, bookmark)
        try:
            if outcome.action is LifecycleAction.SUMMARIZE_THEN_PUBLISH:
                log.info(
                    "Bookmark %s is tagged but has no summary, requesting one",
                    bookmark_id,
                )
                bookmark = await self.enrichment.ensure_summary(bookmark)

            post = compose(bookmark, self._rng)
            outcome.published = True
            outcome.results = await self.dispatcher.publish(post)
        finally:
            self.tracker.finish(bookmark_id)
            log.info("Bookmark %s no longer tracked", bookmark_id)

        log.info(
            "Publish finished for %s",
            bookmark_id,
            extra={"results": {k: v is not None for k, v in outcome.results.items()}},
        )
