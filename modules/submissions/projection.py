"""Realtime projection of one submission collection.

Holds the feed-derived, ordered view of a collection for the lifetime of a
subscription. Every feed notification replaces the whole view (no
incremental patching), re-derives the counts and publishes an immutable
``ProjectionSnapshot`` to listeners.

A feed error clears the view and reports zero counts: stale unread badges
would mislead staff. ``ERROR`` is a distinct state from ``READY`` with an
empty collection. A single unreadable document is not a feed error; it is
logged, left out and listed on the snapshot as rejected.

The Firestore SDK calls back from its own thread, so the view is swapped
under a lock.
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterator, NamedTuple, Optional

from modules.store.backend import DocumentStore, StoreDocument

from .counters import EMPTY_COUNTS, Counts, count_submissions
from .errors import FeedError
from .models import Submission, record_from_document
from .status import SubmissionKind

logger = logging.getLogger(__name__)

Listener = Callable[["ProjectionSnapshot"], None]


class ProjectionState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class RejectedDocument(NamedTuple):
    """A feed document that could not be turned into a record."""

    id: str
    reason: str


@dataclass(frozen=True)
class ProjectionSnapshot:
    """What consumers see after each feed notification.

    ``rejected`` lists documents left out of ``items`` and ``counts``
    because they could not be read (unknown status, bad timestamp).
    """

    kind: SubmissionKind
    state: ProjectionState = ProjectionState.LOADING
    items: tuple = ()
    counts: Counts = EMPTY_COUNTS
    error: Optional[str] = None
    rejected: tuple = ()
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def feed_unavailable(self) -> bool:
        return self.state is ProjectionState.ERROR

    def get(self, submission_id: str) -> Optional[Submission]:
        for record in self.items:
            if record.id == submission_id:
                return record
        return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RealtimeProjection:
    """Ordered, feed-driven view of one submission kind."""

    def __init__(
        self,
        store: DocumentStore,
        kind: SubmissionKind,
        collection: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.kind = kind
        self.collection = collection or kind.collection
        self._clock = clock
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []
        self._unsubscribe = None
        self._generation = 0
        self._snapshot = ProjectionSnapshot(kind=kind)

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> ProjectionSnapshot:
        return self._snapshot

    @property
    def counts(self) -> Counts:
        return self._snapshot.counts

    @property
    def is_subscribed(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ------------------------------------------------------------------
    # Subscription lifecycle
    # ------------------------------------------------------------------

    def subscribe(self) -> None:
        """Open the single feed subscription for this projection.

        Setup failures put the projection into the error state instead of
        raising.
        """
        if self._unsubscribe is not None:
            raise RuntimeError(f"{self.collection}: already subscribed")

        self._generation += 1
        generation = self._generation

        def on_snapshot(documents: list[StoreDocument]) -> None:
            if generation == self._generation:
                self._apply_snapshot(documents)

        def on_error(error: Exception) -> None:
            if generation == self._generation:
                self._apply_error(error)

        try:
            self._unsubscribe = self.store.subscribe(self.collection, on_snapshot, on_error)
        except Exception as e:
            logger.error(f"Feed setup failed for '{self.collection}': {e}")
            self._apply_error(FeedError(f"Feed setup failed: {e}"))
            return
        logger.info(f"Subscribed to '{self.collection}' feed")

    def close(self) -> None:
        """Release the subscription; safe to call more than once."""
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        # late callbacks from the released feed are ignored
        self._generation += 1
        if unsubscribe is None:
            return
        try:
            unsubscribe()
        finally:
            logger.info(f"Unsubscribed from '{self.collection}' feed")

    @contextmanager
    def subscribed(self) -> Iterator["RealtimeProjection"]:
        """Scope a subscription: released on every exit path."""
        try:
            self.subscribe()
            yield self
        finally:
            self.close()

    def retry(self) -> None:
        """Drop the current subscription and subscribe again."""
        logger.info(f"Retrying '{self.collection}' feed")
        self.close()
        snapshot = ProjectionSnapshot(kind=self.kind)
        with self._lock:
            self._snapshot = snapshot
        self._publish(snapshot)
        self.subscribe()

    # ------------------------------------------------------------------
    # Feed callbacks
    # ------------------------------------------------------------------

    def _apply_snapshot(self, documents: list[StoreDocument]) -> None:
        now = self._clock()
        records, rejected = [], []
        for doc in documents:
            try:
                records.append(record_from_document(self.kind, doc.id, doc.data, now))
            except Exception as e:
                logger.warning(f"Skipping unreadable document {self.collection}/{doc.id}: {e}")
                rejected.append(RejectedDocument(doc.id, str(e)))

        records.sort(key=lambda r: r.created_at, reverse=True)
        snapshot = ProjectionSnapshot(
            kind=self.kind,
            state=ProjectionState.READY,
            items=tuple(records),
            counts=count_submissions(records),
            rejected=tuple(rejected),
        )
        with self._lock:
            self._snapshot = snapshot
        logger.debug(
            f"'{self.collection}' snapshot: {snapshot.counts.total} total, "
            f"{snapshot.counts.unread} unread"
        )
        self._publish(snapshot)

    def _apply_error(self, error: Exception) -> None:
        logger.warning(f"Feed unavailable for '{self.collection}': {error}")
        snapshot = ProjectionSnapshot(
            kind=self.kind,
            state=ProjectionState.ERROR,
            error=str(error) or error.__class__.__name__,
        )
        with self._lock:
            self._snapshot = snapshot
        self._publish(snapshot)

    def _publish(self, snapshot: ProjectionSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Projection listener failed for '{self.collection}'")
