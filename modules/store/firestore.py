"""Cloud Firestore document store (production backend).

The public website writes applications and contact messages straight into
Firestore; this backend reads them through a realtime listener.

Authentication priority:
  1. FIRESTORE_CREDENTIALS: path to a service account JSON file
  2. GOOGLE_APPLICATION_CREDENTIALS / default credentials

The Python SDK invokes snapshot callbacks on its own thread and has no
error callback for a running listener; setup failures and unreadable
snapshots are reported through ``on_error``.
"""
import asyncio
import logging
from typing import Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from modules.submissions.errors import FeedError, SubmissionNotFound

from .backend import ErrorCallback, SnapshotCallback, StoreDocument, Unsubscribe

logger = logging.getLogger(__name__)


class FirestoreStore:
    """DocumentStore backed by Cloud Firestore."""

    def __init__(self, client: "firestore.Client"):
        self.client = client

    @classmethod
    def from_config(cls, config) -> "FirestoreStore":
        kwargs = {}
        if config.firestore_project:
            kwargs["project"] = config.firestore_project
        if config.firestore_credentials:
            client = firestore.Client.from_service_account_json(
                config.firestore_credentials, **kwargs
            )
        else:
            client = firestore.Client(**kwargs)
        logger.info(f"Firestore client for project '{client.project}'")
        return cls(client)

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        # No server-side order_by: documents without createdAt would be
        # excluded from the query. The projection sorts.
        ref = self.client.collection(collection)

        def callback(docs, changes, read_time):
            try:
                documents = [StoreDocument(doc.id, doc.to_dict() or {}) for doc in docs]
            except Exception as e:
                logger.error(f"Unreadable Firestore snapshot for '{collection}': {e}")
                on_error(FeedError(f"Unreadable snapshot: {e}"))
                return
            on_snapshot(documents)

        watch = ref.on_snapshot(callback)
        return watch.unsubscribe

    async def update_fields(self, collection: str, doc_id: str, fields: dict) -> None:
        ref = self.client.collection(collection).document(doc_id)
        try:
            await asyncio.to_thread(ref.update, fields)
        except google_exceptions.NotFound as e:
            raise SubmissionNotFound(collection, doc_id) from e

    async def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        ref = self.client.collection(collection).document(doc_id)
        snapshot = await asyncio.to_thread(ref.get)
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def add_document(self, collection: str, fields: dict) -> str:
        fields = dict(fields)
        fields.setdefault("createdAt", firestore.SERVER_TIMESTAMP)
        _, ref = await asyncio.to_thread(self.client.collection(collection).add, fields)
        logger.debug(f"Added {collection}/{ref.id}")
        return ref.id

    def close(self) -> None:
        self.client.close()
