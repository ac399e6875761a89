"""Dashboard runtime: one projection and one controller per submission kind.

The store and mail client are passed in; the dashboard owns only its feed
subscriptions, which ``running()`` scopes.
"""
import logging
from contextlib import ExitStack, contextmanager
from typing import Iterator

from modules.store.backend import DocumentStore
from modules.submissions import (
    NotificationSurface,
    RealtimeProjection,
    SubmissionKind,
    TransitionController,
)

logger = logging.getLogger(__name__)


class Dashboard:
    """Wires projections, controllers and the notification surface."""

    def __init__(self, store: DocumentStore, mailer, config):
        self.store = store
        self.mailer = mailer
        self.config = config

        collections = {
            SubmissionKind.APPLICATIONS: config.store.applications_collection,
            SubmissionKind.INQUIRIES: config.store.inquiries_collection,
        }
        self.surface = NotificationSurface()
        self.projections: dict[SubmissionKind, RealtimeProjection] = {}
        self.controllers: dict[SubmissionKind, TransitionController] = {}
        for kind, collection in collections.items():
            projection = RealtimeProjection(store, kind, collection=collection)
            controller = TransitionController(store, kind, collection=collection)
            self.surface.attach(projection)
            projection.add_listener(controller.reconcile)
            self.projections[kind] = projection
            self.controllers[kind] = controller

    @contextmanager
    def running(self) -> Iterator["Dashboard"]:
        """Subscribe every projection; all are released on exit."""
        with ExitStack() as stack:
            for projection in self.projections.values():
                stack.enter_context(projection.subscribed())
            logger.info(f"Dashboard running: {self.surface.summary.caption}")
            yield self

    def feed_states(self) -> dict[str, str]:
        return {kind.value: p.snapshot.state.value for kind, p in self.projections.items()}
