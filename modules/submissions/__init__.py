"""Submission status and unread-count state machine.

Reads:   change feed → RealtimeProjection → Counts → NotificationSurface
Writes:  staff action → TransitionController → DocumentStore → feed

Application:  new → reviewed → contacted → hired | rejected
Inquiry:      new → reviewed → responded
"""

from .errors import (
    DashboardError,
    ExportError,
    FeedError,
    InvalidStatusError,
    ReplyValidationError,
    SendError,
    SubmissionNotFound,
    TransitionError,
)
from .status import (
    ApplicationStatus,
    InquiryStatus,
    SubmissionKind,
    effective_status,
    is_unread,
    parse_status,
)
from .models import Application, Inquiry, Submission, record_from_document
from .counters import Counts, count_submissions
from .notices import Notice
from .projection import (
    ProjectionSnapshot,
    ProjectionState,
    RealtimeProjection,
    RejectedDocument,
)
from .transitions import ActionResult, DetailView, TransitionController
from .notifications import DashboardSummary, NotificationSurface, summarize
from .filters import filter_submissions

__all__ = [
    # Errors
    "DashboardError",
    "ExportError",
    "FeedError",
    "InvalidStatusError",
    "ReplyValidationError",
    "SendError",
    "SubmissionNotFound",
    "TransitionError",
    # Status model
    "ApplicationStatus",
    "InquiryStatus",
    "SubmissionKind",
    "effective_status",
    "is_unread",
    "parse_status",
    # Records
    "Application",
    "Inquiry",
    "Submission",
    "record_from_document",
    # Counting and projection
    "Counts",
    "count_submissions",
    "ProjectionSnapshot",
    "ProjectionState",
    "RealtimeProjection",
    "RejectedDocument",
    # Transitions
    "ActionResult",
    "DetailView",
    "Notice",
    "TransitionController",
    # Summary and filters
    "DashboardSummary",
    "NotificationSurface",
    "summarize",
    "filter_submissions",
]
