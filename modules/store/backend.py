"""Document store contract shared by the Firestore and SQL backends.

The dashboard core talks to persistence only through this protocol:

    subscribe(collection, on_snapshot, on_error) -> unsubscribe()
    update_fields(collection, id, fields)        partial update
    get_document(collection, id)                 single read
    add_document(collection, fields) -> id       used by seeding

``on_snapshot`` always receives the full current collection, never a diff.
"""
import logging
from typing import Callable, NamedTuple, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class StoreDocument(NamedTuple):
    """A raw document as delivered by the feed."""

    id: str
    data: dict


SnapshotCallback = Callable[[list[StoreDocument]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class DocumentStore(Protocol):
    """Storage backend protocol."""

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        """Start a change feed; deliver an initial snapshot and one per write."""
        ...

    async def update_fields(self, collection: str, doc_id: str, fields: dict) -> None:
        """Set the named fields, leave all others untouched.

        Raises SubmissionNotFound for unknown ids.
        """
        ...

    async def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    async def add_document(self, collection: str, fields: dict) -> str:
        ...

    def close(self) -> None:
        ...


def create_store(config) -> DocumentStore:
    """Build the configured backend.

    ``config`` is a ``StoreConfig``; ``backend`` is ``firestore`` or ``sql``.
    """
    if config.backend == "firestore":
        from .firestore import FirestoreStore

        store = FirestoreStore.from_config(config)
    elif config.backend == "sql":
        from .sql import SQLStore

        store = SQLStore.from_url(config.database_url, echo=config.echo)
    else:
        raise ValueError(f"Unknown store backend: {config.backend!r}")
    logger.info(f"Document store: {store.__class__.__name__}")
    return store

