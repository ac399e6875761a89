"""Exception hierarchy for the dashboard core.

Every failure a staff action can hit is one of these; the HTTP layer turns
them into notices instead of letting them escape.
"""
from typing import Optional


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class InvalidStatusError(DashboardError, ValueError):
    """A status value is not a member of the submission kind's enum."""

    def __init__(self, kind: str, value):
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid status for {kind}: {value!r}")


class FeedError(DashboardError):
    """The change feed could not be set up or delivered an error."""


class TransitionError(DashboardError):
    """A remote status update failed."""

    def __init__(self, submission_id: str, message: str):
        self.submission_id = submission_id
        super().__init__(message)


class SubmissionNotFound(TransitionError):
    """The store does not know the submission id."""

    def __init__(self, collection: str, submission_id: str):
        self.collection = collection
        super().__init__(
            submission_id, f"No document '{submission_id}' in '{collection}'"
        )


class ReplyValidationError(DashboardError, ValueError):
    """A reply draft was rejected before anything was sent."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class SendError(DashboardError):
    """The mail provider refused or failed to deliver a message.

    ``reason`` is one of the ``SendFailureReason`` values.
    """

    def __init__(self, reason: str, message: str, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(message)


class ExportError(DashboardError):
    """Rendering a submission to PDF failed."""
