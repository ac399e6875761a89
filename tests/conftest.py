"""
Care Dashboard Test Configuration

Shared fixtures for all tests.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from modules.dashboard.config import AuthConfig, DashboardConfig, MailConfig, StoreConfig
from modules.mail import SendReceipt
from modules.store import SQLStore, StoreDocument
from modules.submissions import SendError


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# FIXTURES: Sample Data
# =============================================================================

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_applications() -> List[Dict]:
    """Application documents as the website writes them."""
    return [
        {
            "fullName": "Sarah Johnson",
            "email": "sarah.johnson@email.com",
            "phone": "(555) 123-4567",
            "availability": "Full Time",
            "education": "BSc Nursing, State University 2020",
            "references": "Dr. Emily Smith - Previous Supervisor",
            "resume": "https://example.com/resume-sarah.pdf",
            "createdAt": datetime(2026, 2, 20, 9, 0, tzinfo=timezone.utc),
        },
        {
            "fullName": "Michael Chen",
            "email": "michael.chen@email.com",
            "availability": "Part Time",
            "status": "reviewed",
            "createdAt": datetime(2026, 2, 22, 9, 0, tzinfo=timezone.utc),
        },
        {
            "fullName": "Jennifer Williams",
            "email": "jennifer.williams@email.com",
            "availability": "Flexible",
            "status": "contacted",
            "createdAt": datetime(2026, 2, 18, 9, 0, tzinfo=timezone.utc),
        },
    ]


@pytest.fixture
def sample_inquiries() -> List[Dict]:
    """Contact-form documents."""
    return [
        {
            "name": "Robert Thompson",
            "email": "robert.thompson@email.com",
            "phone": "(555) 456-7890",
            "message": "Looking for care for my mother.\nPlease call me.",
            "status": "new",
            "createdAt": datetime(2026, 2, 25, 9, 0, tzinfo=timezone.utc),
        },
        {
            "fullName": "Lisa Anderson",
            "email": "lisa.anderson@email.com",
            "phone": "(555) 567-8901",
            "message": "Temporary help after surgery.",
            "status": "responded",
            "createdAt": datetime(2026, 2, 24, 9, 0, tzinfo=timezone.utc),
        },
    ]


# =============================================================================
# FIXTURES: Fakes
# =============================================================================

class FakeStore:
    """In-memory DocumentStore with a hand-driven change feed."""

    def __init__(self, collections: Optional[Dict[str, Dict[str, dict]]] = None):
        self.collections = collections or {}
        self.subscribers: Dict[str, list] = {}
        self.updates: List[tuple] = []
        self.unsubscribed: List[str] = []
        self.subscribe_error: Optional[Exception] = None
        self.update_error: Optional[Exception] = None
        self.auto_emit = False
        self.closed = False

    def documents(self, collection: str) -> List[StoreDocument]:
        return [StoreDocument(k, dict(v)) for k, v in self.collections.get(collection, {}).items()]

    def subscribe(self, collection, on_snapshot, on_error):
        if self.subscribe_error is not None:
            raise self.subscribe_error
        entry = (on_snapshot, on_error)
        self.subscribers.setdefault(collection, []).append(entry)

        def unsubscribe():
            self.unsubscribed.append(collection)
            self.subscribers[collection].remove(entry)

        return unsubscribe

    def emit(self, collection: str, documents: Optional[List[StoreDocument]] = None):
        documents = self.documents(collection) if documents is None else documents
        for on_snapshot, _ in list(self.subscribers.get(collection, [])):
            on_snapshot(documents)

    def fail(self, collection: str, error: Exception):
        for _, on_error in list(self.subscribers.get(collection, [])):
            on_error(error)

    async def update_fields(self, collection, doc_id, fields):
        self.updates.append((collection, doc_id, dict(fields)))
        if self.update_error is not None:
            raise self.update_error
        self.collections.setdefault(collection, {}).setdefault(doc_id, {}).update(fields)
        if self.auto_emit:
            self.emit(collection)

    async def get_document(self, collection, doc_id):
        data = self.collections.get(collection, {}).get(doc_id)
        return dict(data) if data is not None else None

    async def add_document(self, collection, fields):
        docs = self.collections.setdefault(collection, {})
        doc_id = f"doc{len(docs) + 1}"
        docs[doc_id] = dict(fields)
        return doc_id

    def close(self):
        self.closed = True


class FakeMailer:
    """Mail client recording every send; set ``error`` to make sends fail."""

    is_configured = True

    def __init__(self):
        self.sent: List[dict] = []
        self.error: Optional[SendError] = None

    async def send(self, to, subject, html):
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html": html})
        return SendReceipt(id=f"msg_{len(self.sent)}", to=to, subject=subject)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def seeded_fake_store(sample_applications, sample_inquiries) -> FakeStore:
    """Fake store with ids a0..a2 (applications) and i0..i1 (contacts)."""
    return FakeStore({
        "applications": {f"a{i}": dict(d) for i, d in enumerate(sample_applications)},
        "contacts": {f"i{i}": dict(d) for i, d in enumerate(sample_inquiries)},
    })


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def sql_store(tmp_path):
    """File-backed SQLite store (usable from the TestClient thread)."""
    store = SQLStore.from_url(f"sqlite:///{tmp_path}/test.db")
    yield store
    store.close()


@pytest.fixture
def seeded_store(sql_store, sample_applications, sample_inquiries):
    """SQL store with the sample documents; returns (store, ids by name)."""
    ids = {}
    for doc in sample_applications:
        ids[doc["fullName"]] = sql_store.insert("applications", doc)
    for doc in sample_inquiries:
        ids[doc.get("fullName") or doc["name"]] = sql_store.insert("contacts", doc)
    return sql_store, ids


# =============================================================================
# FIXTURES: Configuration
# =============================================================================

@pytest.fixture
def config(tmp_path) -> DashboardConfig:
    return DashboardConfig(
        store=StoreConfig(database_url=f"sqlite:///{tmp_path}/config.db"),
        mail=MailConfig(api_key="re_test_key", sender="Care Team <care@example.org>"),
        auth=AuthConfig(secret_key="test-secret-key"),
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove dashboard env overrides so tests see file/default values."""
    import os
    for key in list(os.environ):
        if key.startswith("CONFIG__"):
            monkeypatch.delenv(key, raising=False)
    for key in ("CONFIG_PATH", "RESEND_API_KEY", "MAIL_FROM", "JWT_SECRET_KEY",
                "DATABASE_URL", "FIRESTORE_PROJECT", "FIRESTORE_CREDENTIALS", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
