"""Status model for submissions.

Two independent lifecycles:

    Application:  new → reviewed → contacted → hired | rejected
    Inquiry:      new → reviewed → responded

The chains are not enforced: staff may set any state directly. A stored
document without a status is ``new``; that rule lives in
``effective_status`` and nowhere else.
"""
from enum import Enum
from typing import Optional, Union

from .errors import InvalidStatusError


class ApplicationStatus(str, Enum):
    """Lifecycle of a job application."""

    NEW = "new"
    REVIEWED = "reviewed"
    CONTACTED = "contacted"
    HIRED = "hired"
    REJECTED = "rejected"


class InquiryStatus(str, Enum):
    """Lifecycle of a contact inquiry."""

    NEW = "new"
    REVIEWED = "reviewed"
    RESPONDED = "responded"


Status = Union[ApplicationStatus, InquiryStatus]


class SubmissionKind(str, Enum):
    """The two submission kinds shown as dashboard tabs."""

    APPLICATIONS = "applications"
    INQUIRIES = "inquiries"

    @property
    def status_enum(self) -> type:
        if self is SubmissionKind.APPLICATIONS:
            return ApplicationStatus
        return InquiryStatus

    @property
    def collection(self) -> str:
        """Default collection name in the document store."""
        if self is SubmissionKind.APPLICATIONS:
            return "applications"
        return "contacts"

    @property
    def replied_status(self) -> Status:
        """Status a submission moves to once a reply has been sent."""
        if self is SubmissionKind.APPLICATIONS:
            return ApplicationStatus.CONTACTED
        return InquiryStatus.RESPONDED

    @property
    def reviewed_status(self) -> Status:
        return self.status_enum("reviewed")

    @property
    def quick_actions(self) -> tuple:
        """Statuses offered as one-click actions in the detail view."""
        return (self.reviewed_status, self.replied_status)

    @property
    def label(self) -> str:
        return "application" if self is SubmissionKind.APPLICATIONS else "inquiry"


def effective_status(kind: SubmissionKind, raw: Optional[Union[str, Status]]) -> Status:
    """Resolve a stored status value to a member of the kind's enum.

    ``None`` and the empty string mean ``new``. Any other value must name a
    member of the kind's enum.
    """
    enum = kind.status_enum
    if raw is None or raw == "":
        return enum("new")
    if isinstance(raw, enum):
        return raw
    try:
        return enum(raw.value if isinstance(raw, Enum) else raw)
    except ValueError:
        raise InvalidStatusError(kind.value, raw) from None


def parse_status(kind: SubmissionKind, value) -> Status:
    """Validate a requested target status (no defaulting)."""
    if value is None or value == "":
        raise InvalidStatusError(kind.value, value)
    return effective_status(kind, value)


def is_unread(status: Status) -> bool:
    """The unread predicate: the effective status is ``new``."""
    return status.value == "new"


def status_label(status: Status) -> str:
    return status.value.capitalize()
