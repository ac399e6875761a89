"""Tests for the dashboard-wide notification surface."""
import threading

from modules.store import StoreDocument
from modules.submissions import (
    Counts,
    FeedError,
    NotificationSurface,
    ProjectionSnapshot,
    ProjectionState,
    RealtimeProjection,
    SubmissionKind,
    summarize,
)
from modules.submissions.notifications import summary_caption


class TestSummary:

    def test_totals_add_up(self):
        summary = summarize(Counts(total=3, unread=1), Counts(total=2, unread=2))
        assert summary.total_unread == 3
        assert summary.total_all == 5
        assert summary.caption == "3 unread of 5 total"

    def test_captions(self):
        assert summary_caption(0, 0) == "No submissions yet"
        assert summary_caption(0, 4) == "All 4 items read"
        assert summary_caption(1, 4) == "1 unread of 4 total"

    def test_unavailable_feed_flagged(self):
        summary = summarize(Counts(), Counts(1, 1), frozenset({SubmissionKind.APPLICATIONS}))
        assert summary.applications.feed_unavailable
        assert summary.feeds_unavailable == ["applications"]
        assert summary.total_all == 1


class TestNotificationSurface:

    def _wire(self, fake_store, surface):
        apps = RealtimeProjection(fake_store, SubmissionKind.APPLICATIONS)
        inqs = RealtimeProjection(fake_store, SubmissionKind.INQUIRIES)
        surface.attach(apps)
        surface.attach(inqs)
        apps.subscribe()
        inqs.subscribe()
        return apps, inqs

    def test_follows_both_feeds(self, fake_store):
        changes = []
        surface = NotificationSurface(on_change=changes.append)
        self._wire(fake_store, surface)

        fake_store.emit("applications", [StoreDocument("a1", {}), StoreDocument("a2", {"status": "hired"})])
        fake_store.emit("contacts", [StoreDocument("c1", {"status": "new"})])

        assert surface.summary.applications.unread == 1
        assert surface.summary.inquiries.unread == 1
        assert surface.summary.total_unread == 2
        assert surface.summary.total_all == 3
        assert changes[-1] == surface.summary

    def test_error_zeroes_one_kind(self, fake_store):
        surface = NotificationSurface()
        self._wire(fake_store, surface)
        fake_store.emit("applications", [StoreDocument("a1", {})])
        fake_store.emit("contacts", [StoreDocument("c1", {})])

        fake_store.fail("applications", FeedError("denied"))
        assert surface.summary.applications.total == 0
        assert surface.summary.applications.feed_unavailable
        assert surface.summary.total_all == 1

        fake_store.emit("applications", [StoreDocument("a1", {})])
        assert surface.summary.feeds_unavailable == []
        assert surface.summary.total_all == 2

    def test_detach(self, fake_store):
        surface = NotificationSurface()
        apps = RealtimeProjection(fake_store, SubmissionKind.APPLICATIONS)
        detach = surface.attach(apps)
        detach()
        apps.subscribe()
        fake_store.emit("applications", [StoreDocument("a1", {})])
        assert surface.summary.total_all == 0


class TestConcurrentFeeds:

    def test_interleaved_updates_keep_both_counts(self, monkeypatch):
        from modules.submissions import notifications

        surface = NotificationSurface()
        entered, release = threading.Event(), threading.Event()
        real_summarize = notifications.summarize
        calls = []

        def slow_first_summarize(*args):
            calls.append(args)
            if len(calls) == 1:
                entered.set()
                release.wait(timeout=2)
            return real_summarize(*args)

        monkeypatch.setattr(notifications, "summarize", slow_first_summarize)

        apps = ProjectionSnapshot(SubmissionKind.APPLICATIONS, ProjectionState.READY,
                                  counts=Counts(total=3, unread=1))
        inqs = ProjectionSnapshot(SubmissionKind.INQUIRIES, ProjectionState.READY,
                                  counts=Counts(total=2, unread=2))

        first = threading.Thread(target=surface.update, args=(apps,))
        first.start()
        assert entered.wait(timeout=2)

        second = threading.Thread(target=surface.update, args=(inqs,))
        second.start()
        second.join(timeout=0.2)
        # the inquiries update waits for the applications one
        assert second.is_alive()

        release.set()
        first.join(timeout=2)
        second.join(timeout=2)

        assert surface.summary.total_all == 5
        assert surface.summary.total_unread == 3
