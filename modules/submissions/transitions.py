"""Status transitions for one submission kind.

A transition writes ``status`` and ``lastViewed`` through the document
store. The projection is never patched locally; it catches up when the
feed re-delivers. The open detail view, however, is advanced in place at
once so the actor sees the result of their own action without lag.

Concurrent transitions on the same id are neither queued nor rejected:
each one issues its own update and the store's last write wins.

Two staff actions transition as a side effect:
  - opening an unread submission     → reviewed
  - sending a reply successfully     → contacted (application)
                                       responded (inquiry)
"""
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from modules.store.backend import DocumentStore

from .errors import (
    ReplyValidationError,
    SendError,
    SubmissionNotFound,
    TransitionError,
)
from .models import Submission, record_from_document
from .notices import Notice
from .projection import ProjectionSnapshot
from .status import Status, SubmissionKind, parse_status

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DetailView:
    """The submission currently open in the detail pane.

    ``confirmed`` is False while a local status change has not yet been
    seen on the feed.
    """

    record: Submission
    composer: Any = None
    confirmed: bool = True


@dataclass
class ActionResult:
    """Outcome of a staff action that may transition as a side effect."""

    record: Submission
    transitioned: bool = False
    notice: Optional[Notice] = None
    receipt: Any = None


@dataclass
class TransitionController:
    """Applies status transitions for one submission kind."""

    store: DocumentStore
    kind: SubmissionKind
    collection: Optional[str] = None
    clock: Callable[[], datetime] = _utcnow
    detail: Optional[DetailView] = None
    _in_flight: Counter = field(default_factory=Counter)
    # guards ``detail``: reconcile runs on the feed's thread
    _lock: Any = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self):
        self.collection = self.collection or self.kind.collection

    # ------------------------------------------------------------------
    # Updating flags
    # ------------------------------------------------------------------

    @property
    def updating(self) -> frozenset:
        """Ids with at least one transition in flight."""
        return frozenset(sid for sid, n in self._in_flight.items() if n > 0)

    def is_updating(self, submission_id: str) -> bool:
        return self._in_flight[submission_id] > 0

    # ------------------------------------------------------------------
    # Core operation
    # ------------------------------------------------------------------

    async def transition(self, submission_id: str, new_status) -> Status:
        """Persist ``new_status`` for one submission.

        Raises InvalidStatusError before any remote call, SubmissionNotFound
        for unknown ids and TransitionError when the update fails. A failed
        update does not roll back the detail view.
        """
        status = parse_status(self.kind, new_status)
        now = self.clock()

        self._in_flight[submission_id] += 1
        with self._lock:
            detail = self.detail
            if detail is not None and detail.record.id == submission_id:
                detail.record = detail.record.with_status(status, now)
                detail.confirmed = False

        try:
            await self.store.update_fields(
                self.collection,
                submission_id,
                {"status": status.value, "lastViewed": now},
            )
        except TransitionError as e:
            logger.warning(f"Transition {self.collection}/{submission_id} → {status.value} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Transition {self.collection}/{submission_id} → {status.value} failed: {e}")
            raise TransitionError(
                submission_id, f"Failed to update {self.kind.label} status: {e}"
            ) from e
        finally:
            self._in_flight[submission_id] -= 1
            if self._in_flight[submission_id] <= 0:
                del self._in_flight[submission_id]

        logger.info(f"Transition {self.collection}/{submission_id} → {status.value}")
        return status

    # ------------------------------------------------------------------
    # Detail view
    # ------------------------------------------------------------------

    async def resolve(self, submission_id: str,
                      snapshot: Optional[ProjectionSnapshot] = None) -> Submission:
        """Find a submission in the snapshot, falling back to the store."""
        if snapshot is not None:
            record = snapshot.get(submission_id)
            if record is not None:
                return record
        data = await self.store.get_document(self.collection, submission_id)
        if data is None:
            raise SubmissionNotFound(self.collection, submission_id)
        return record_from_document(self.kind, submission_id, data, self.clock())

    async def open(self, record: Submission) -> ActionResult:
        """Show a submission; an unread one is marked reviewed."""
        from modules.mail.reply import ReplyComposer

        detail = DetailView(record=record, composer=ReplyComposer(to=record.email))
        with self._lock:
            self.detail = detail
        if not record.unread:
            return ActionResult(record=record)

        try:
            await self.transition(record.id, self.kind.reviewed_status)
        except TransitionError as e:
            return ActionResult(
                record=detail.record,
                notice=Notice.error("transition-failed", str(e)),
            )
        return ActionResult(record=detail.record, transitioned=True)

    def close_detail(self) -> None:
        with self._lock:
            self.detail = None

    def reconcile(self, snapshot: ProjectionSnapshot) -> None:
        """Projection listener: align the open detail view with the feed."""
        if snapshot.kind is not self.kind:
            return
        with self._lock:
            detail = self.detail
            if detail is None:
                return
            fresh = snapshot.get(detail.record.id)
            if fresh is None:
                return
            if fresh.status == detail.record.status:
                detail.record = fresh
                detail.confirmed = True
            elif detail.confirmed:
                # changed elsewhere while open
                detail.record = fresh

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------

    async def send_reply(self, mailer, subject: Optional[str] = None,
                         message: Optional[str] = None) -> ActionResult:
        """Send the composer's reply for the open submission.

        Validation and send failures come back as notices and leave the
        composer populated; only a successful send transitions.
        """
        detail = self.detail
        if detail is None:
            raise RuntimeError(f"No {self.kind.label} is open")

        composer = detail.composer
        if subject is not None:
            composer.subject = subject
        if message is not None:
            composer.message = message

        try:
            draft = composer.draft()
        except ReplyValidationError as e:
            return ActionResult(
                record=detail.record,
                notice=Notice.error("validation", str(e), field=e.field),
            )

        try:
            receipt = await mailer.send(draft.to, draft.subject, draft.render_html())
        except SendError as e:
            logger.warning(f"Reply to {self.collection}/{detail.record.id} not sent: {e.reason}")
            return ActionResult(record=detail.record, notice=Notice.error(e.reason, str(e)))

        composer.clear()
        try:
            await self.transition(detail.record.id, self.kind.replied_status)
        except TransitionError as e:
            return ActionResult(
                record=detail.record,
                receipt=receipt,
                notice=Notice.warning(
                    "transition-failed", f"Reply sent, but the status update failed: {e}"
                ),
            )
        return ActionResult(
            record=detail.record,
            transitioned=True,
            receipt=receipt,
            notice=Notice.info("reply-sent", "Reply sent successfully!"),
        )
