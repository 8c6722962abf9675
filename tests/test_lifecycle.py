"""Tests for the Lifecycle Tracker."""

import asyncio

import pytest

from src.core.bookmark import LifecycleStatus
from src.core.lifecycle import LifecycleAction, LifecycleTracker


@pytest.fixture
def tracker() -> LifecycleTracker:
    return LifecycleTracker()


class TestOnCreated:
    def test_starts_tracking(self, tracker):
        tracker.on_created("b1")

        assert "b1" in tracker
        assert tracker.is_tracked("b1")
        assert tracker.get_status("b1") is LifecycleStatus.CREATED
        assert len(tracker) == 1

    def test_overwrites_existing_status(self, tracker, make_bookmark):
        tracker.on_created("b1")
        tracker.on_crawled("b1", make_bookmark(summary="has one"))
        assert tracker.get_status("b1") is LifecycleStatus.SUMMARIZED

        tracker.on_created("b1")

        assert tracker.get_status("b1") is LifecycleStatus.CREATED

    def test_untracked_status_is_none(self, tracker):
        assert tracker.get_status("nope") is None
        assert not tracker.is_tracked("nope")


class TestOnCrawled:
    def test_untracked_is_noop(self, tracker, make_bookmark):
        action = tracker.on_crawled("b2", make_bookmark("b2", summary=None))

        assert action is LifecycleAction.NONE
        assert "b2" not in tracker

    def test_without_summary_requests_one(self, tracker, make_bookmark):
        tracker.on_created("b1")

        action = tracker.on_crawled("b1", make_bookmark(summary=None))

        assert action is LifecycleAction.REQUEST_SUMMARY
        assert tracker.get_status("b1") is LifecycleStatus.SUMMARIZING

    def test_with_summary_marks_summarized(self, tracker, make_bookmark):
        tracker.on_created("b1")

        action = tracker.on_crawled("b1", make_bookmark(summary="Done."))

        assert action is LifecycleAction.NONE
        assert tracker.get_status("b1") is LifecycleStatus.SUMMARIZED


class TestOnTagged:
    def test_untracked_is_noop(self, tracker, make_bookmark):
        assert tracker.on_tagged("b9", make_bookmark("b9")) is LifecycleAction.NONE

    def test_with_summary_publishes(self, tracker, make_bookmark):
        tracker.on_created("b1")
        assert tracker.on_tagged("b1", make_bookmark()) is LifecycleAction.PUBLISH

    def test_without_summary_summarizes_first(self, tracker, make_bookmark):
        tracker.on_created("b1")
        action = tracker.on_tagged("b1", make_bookmark(summary=None))
        assert action is LifecycleAction.SUMMARIZE_THEN_PUBLISH

    def test_does_not_remove_entry(self, tracker, make_bookmark):
        tracker.on_created("b1")
        tracker.on_tagged("b1", make_bookmark())
        assert "b1" in tracker


class TestFinish:
    def test_removes_entry(self, tracker):
        tracker.on_created("b1")
        tracker.finish("b1")
        assert "b1" not in tracker
        assert len(tracker) == 0

    def test_absent_is_noop(self, tracker):
        tracker.finish("never")
        assert len(tracker) == 0

    def test_snapshot_is_a_copy(self, tracker):
        tracker.on_created("b1")
        snapshot = tracker.snapshot()
        tracker.finish("b1")
        assert snapshot == {"b1": LifecycleStatus.CREATED}


class TestLockFor:
    @pytest.mark.asyncio
    async def test_serializes_same_bookmark(self, tracker):
        order = []

        async def worker(name: str, delay: float):
            async with tracker.lock_for("b1"):
                order.append(f"{name}-start")
                await asyncio.sleep(delay)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a", 0.02), worker("b", 0))

        assert order == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_different_bookmarks_run_concurrently(self, tracker):
        order = []

        async def worker(bookmark_id: str):
            async with tracker.lock_for(bookmark_id):
                order.append(f"{bookmark_id}-start")
                await asyncio.sleep(0.01)
                order.append(f"{bookmark_id}-end")

        await asyncio.gather(worker("b1"), worker("b2"))

        assert order[:2] == ["b1-start", "b2-start"]

    @pytest.mark.asyncio
    async def test_locks_are_released(self, tracker):
        async with tracker.lock_for("b1"):
            assert tracker.active_locks() == 1
        assert tracker.active_locks() == 0

    @pytest.mark.asyncio
    async def test_lock_released_on_error(self, tracker):
        with pytest.raises(RuntimeError):
            async with tracker.lock_for("b1"):
                raise RuntimeError("boom")

        assert tracker.active_locks() == 0
        async with tracker.lock_for("b1"):
            pass
