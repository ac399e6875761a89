"""SQLAlchemy 2.0 models for the SQL document store.

Two tables:
- submissions:     one row per application/inquiry document; payload as JSON
- status_history:  audit trail for status changes
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    event,
    inspect,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
)


class Base(DeclarativeBase):
    """Shared declarative base for the store models."""
    pass


class SubmissionRow(Base):
    """A stored document of any submission collection.

    ``status`` and the timestamps are columns so they can be indexed and
    audited; every other field lives in ``data``.
    """
    __tablename__ = "submissions"

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=lambda: uuid4().hex
    )
    collection: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_viewed: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    history: Mapped[list["StatusHistory"]] = relationship(
        back_populates="submission",
        cascade="all, delete-orphan",
        order_by="StatusHistory.changed_at.desc()",
    )

    __table_args__ = (
        Index("ix_submissions_collection_created", "collection", "created_at"),
        Index("ix_submissions_status", "status"),
    )

    def to_document(self) -> dict:
        """Document shape as the feed delivers it (absent status stays absent)."""
        doc = dict(self.data or {})
        doc["createdAt"] = self.created_at
        if self.status is not None:
            doc["status"] = self.status
        else:
            doc.pop("status", None)
        if self.last_viewed is not None:
            doc["lastViewed"] = self.last_viewed
        return doc

    def __repr__(self) -> str:
        return (
            f"<SubmissionRow(id={self.id}, "
            f"collection='{self.collection}', "
            f"status='{self.status}')>"
        )


class StatusHistory(Base):
    """Audit trail, one row per status change."""
    __tablename__ = "status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    submission_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False
    )
    old_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    submission: Mapped["SubmissionRow"] = relationship(back_populates="history")

    __table_args__ = (
        Index("ix_status_history_submission", "submission_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<StatusHistory(submission_id={self.submission_id}, "
            f"'{self.old_value}' → '{self.new_value}')>"
        )


# ---------------------------------------------------------------------------
# Status audit trail
# ---------------------------------------------------------------------------

def _status_change(row: SubmissionRow) -> Optional[tuple]:
    """(old, new) if the row's status was modified in this unit of work."""
    history = inspect(row).attrs.status.history
    if not history.has_changes():
        return None
    old = next(iter(history.deleted), None)
    new = next(iter(history.added), None)
    return None if old == new else (old, new)


def track_status_changes(session) -> list["StatusHistory"]:
    """Add one StatusHistory row per pending status change in ``session``."""
    entries = []
    for row in session.dirty:
        if not isinstance(row, SubmissionRow):
            continue
        change = _status_change(row)
        if change is not None:
            entries.append(StatusHistory(
                submission_id=row.id, old_value=change[0], new_value=change[1]
            ))
    session.add_all(entries)
    return entries


@event.listens_for(Session, "before_flush")
def _audit_status_on_flush(session, flush_context, instances):
    track_status_changes(session)
