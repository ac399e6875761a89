"""Notification surface: the dashboard-wide unread/total summary."""
import logging
import threading
from typing import Callable, Optional

from pydantic import BaseModel

from .counters import EMPTY_COUNTS, Counts
from .projection import ProjectionSnapshot, RealtimeProjection
from .status import SubmissionKind

logger = logging.getLogger(__name__)


class KindSummary(BaseModel):
    total: int = 0
    unread: int = 0
    feed_unavailable: bool = False


class DashboardSummary(BaseModel):
    """What the sidebar shows."""

    applications: KindSummary = KindSummary()
    inquiries: KindSummary = KindSummary()
    total_unread: int = 0
    total_all: int = 0
    caption: str = "No submissions yet"

    @property
    def feeds_unavailable(self) -> list[str]:
        return [
            kind.value for kind in SubmissionKind
            if getattr(self, kind.value).feed_unavailable
        ]


def summary_caption(total_unread: int, total_all: int) -> str:
    if total_all == 0:
        return "No submissions yet"
    if total_unread > 0:
        return f"{total_unread} unread of {total_all} total"
    return f"All {total_all} items read"


def summarize(applications: Counts, inquiries: Counts,
              unavailable: frozenset = frozenset()) -> DashboardSummary:
    """Aggregate both kinds' counts."""
    total_unread = applications.unread + inquiries.unread
    total_all = applications.total + inquiries.total
    return DashboardSummary(
        applications=KindSummary(
            total=applications.total,
            unread=applications.unread,
            feed_unavailable=SubmissionKind.APPLICATIONS in unavailable,
        ),
        inquiries=KindSummary(
            total=inquiries.total,
            unread=inquiries.unread,
            feed_unavailable=SubmissionKind.INQUIRIES in unavailable,
        ),
        total_unread=total_unread,
        total_all=total_all,
        caption=summary_caption(total_unread, total_all),
    )


class NotificationSurface:
    """Keeps a summary current from both projections' snapshots."""

    def __init__(self, on_change: Optional[Callable[[DashboardSummary], None]] = None):
        self._counts = {kind: EMPTY_COUNTS for kind in SubmissionKind}
        self._unavailable: set = set()
        self._on_change = on_change
        self._lock = threading.Lock()
        self.summary = summarize(EMPTY_COUNTS, EMPTY_COUNTS)

    def attach(self, projection: RealtimeProjection) -> Callable[[], None]:
        """Listen to a projection; returns the detach function."""
        self.update(projection.snapshot)
        return projection.add_listener(self.update)

    def update(self, snapshot: ProjectionSnapshot) -> DashboardSummary:
        # feeds call back on their own threads
        with self._lock:
            self._counts[snapshot.kind] = snapshot.counts
            if snapshot.feed_unavailable:
                self._unavailable.add(snapshot.kind)
            else:
                self._unavailable.discard(snapshot.kind)

            summary = summarize(
                self._counts[SubmissionKind.APPLICATIONS],
                self._counts[SubmissionKind.INQUIRIES],
                frozenset(self._unavailable),
            )
            self.summary = summary
        logger.debug(f"Dashboard summary: {summary.caption}")
        if self._on_change is not None:
            self._on_change(summary)
        return summary
