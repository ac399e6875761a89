"""SQL document store (SQLite by default, any SQLAlchemy URL works).

Used for local development, seeding and tests. The change feed is
in-process: every write made through this store re-reads the affected
collection and delivers the full snapshot to that collection's
subscribers. Writes made by other processes are not observed.

The async methods run the blocking session work, and the fan-out that
follows a write, in a worker thread, as the Firestore backend does.

Environment variables:
  DATABASE_URL  SQLAlchemy URL (default: sqlite:///data/careboard.db)
"""
import asyncio
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import Session, sessionmaker

from modules.submissions.errors import FeedError, SubmissionNotFound

from .backend import ErrorCallback, SnapshotCallback, StoreDocument, Unsubscribe
from .models import Base, StatusHistory, SubmissionRow

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///data/careboard.db"

# document fields stored as columns rather than in the JSON payload
COLUMN_FIELDS = {"createdAt": "created_at", "status": "status", "lastViewed": "last_viewed"}


def get_engine(url: str = DEFAULT_DATABASE_URL, echo: bool = False):
    """Create a SQLAlchemy engine; SQLite gets WAL and foreign keys."""
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(url, echo=echo)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_db(engine) -> None:
    """Create all tables (for initial setup or testing)."""
    Base.metadata.create_all(engine)
    logger.info("Database tables created.")


def _as_column_value(column: str, value):
    if column == "status":
        return None if value in (None, "") else str(getattr(value, "value", value))
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime) and value.tzinfo is not None:
        # stored as naive UTC
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SQLStore:
    """DocumentStore backed by a relational database."""

    def __init__(self, engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self._listeners: dict[str, list[tuple[SnapshotCallback, ErrorCallback]]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_url(cls, url: Optional[str] = None, echo: bool = False) -> "SQLStore":
        engine = get_engine(url or DEFAULT_DATABASE_URL, echo=echo)
        init_db(engine)
        return cls(engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session with auto-commit/rollback."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load_collection(self, collection: str) -> list[StoreDocument]:
        with self.session() as session:
            rows = session.scalars(
                select(SubmissionRow)
                .where(SubmissionRow.collection == collection)
                .order_by(SubmissionRow.created_at.desc())
            ).all()
            return [StoreDocument(row.id, row.to_document()) for row in rows]

    async def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        return await asyncio.to_thread(self.get, collection, doc_id)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self.session() as session:
            row = session.get(SubmissionRow, doc_id)
            if row is None or row.collection != collection:
                return None
            return row.to_document()

    def status_history(self, doc_id: str) -> list[StatusHistory]:
        with self.session() as session:
            return list(session.scalars(
                select(StatusHistory)
                .where(StatusHistory.submission_id == doc_id)
                .order_by(StatusHistory.id)
            ).all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_document(self, collection: str, fields: dict) -> str:
        return await asyncio.to_thread(self.insert, collection, fields)

    def insert(self, collection: str, fields: dict) -> str:
        """Synchronous insert (seeding, tests)."""
        payload = {k: v for k, v in fields.items() if k not in COLUMN_FIELDS}
        columns = {
            column: _as_column_value(column, fields.get(key))
            for key, column in COLUMN_FIELDS.items()
        }
        if columns["created_at"] is None:
            columns["created_at"] = _as_column_value(
                "created_at", datetime.now(timezone.utc)
            )
        with self.session() as session:
            row = SubmissionRow(collection=collection, data=payload, **columns)
            session.add(row)
            session.flush()
            doc_id = row.id
        logger.debug(f"Inserted {collection}/{doc_id}")
        self._notify(collection)
        return doc_id

    async def update_fields(self, collection: str, doc_id: str, fields: dict) -> None:
        await asyncio.to_thread(self.update, collection, doc_id, fields)

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        """Synchronous partial update; subscribers are notified on this thread."""
        with self.session() as session:
            row = session.get(SubmissionRow, doc_id)
            if row is None or row.collection != collection:
                raise SubmissionNotFound(collection, doc_id)
            data = dict(row.data or {})
            for key, value in fields.items():
                column = COLUMN_FIELDS.get(key)
                if column == "created_at":
                    continue  # immutable
                if column:
                    setattr(row, column, _as_column_value(column, value))
                else:
                    data[key] = value
            row.data = data
        self._notify(collection)

    # ------------------------------------------------------------------
    # Change feed
    # ------------------------------------------------------------------

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        entry = (on_snapshot, on_error)
        with self._lock:
            self._listeners.setdefault(collection, []).append(entry)

        def unsubscribe():
            with self._lock:
                listeners = self._listeners.get(collection, [])
                if entry in listeners:
                    listeners.remove(entry)

        self._deliver(collection, [entry])
        return unsubscribe

    def _notify(self, collection: str) -> None:
        with self._lock:
            entries = list(self._listeners.get(collection, []))
        if entries:
            self._deliver(collection, entries)

    def _deliver(self, collection: str, entries) -> None:
        try:
            documents = self.load_collection(collection)
        except Exception as e:
            logger.error(f"Snapshot load failed for '{collection}': {e}")
            for _, on_error in entries:
                on_error(FeedError(f"Snapshot load failed: {e}"))
            return
        for on_snapshot, _ in entries:
            on_snapshot(documents)

    def close(self) -> None:
        with self._lock:
            self._listeners.clear()
        self.engine.dispose()
