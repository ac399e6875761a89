"""Document store backends.

Firestore in production, SQL (SQLite/PostgreSQL) for local development,
seeding and tests. Both implement ``DocumentStore``; pick one with
``create_store(config.store)``.
"""

from .backend import DocumentStore, StoreDocument, create_store
from .models import Base, StatusHistory, SubmissionRow
from .sql import SQLStore, get_engine, init_db

__all__ = [
    "DocumentStore",
    "StoreDocument",
    "create_store",
    "Base",
    "StatusHistory",
    "SubmissionRow",
    "SQLStore",
    "get_engine",
    "init_db",
]
