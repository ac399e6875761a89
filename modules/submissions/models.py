"""Submission records built from raw feed documents.

Documents arrive as plain dicts with the field names the public website
writes (``fullName``, ``education``, ``resume``...). The records normalise
them once; everything downstream works with these models.
"""
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from .status import (
    ApplicationStatus,
    InquiryStatus,
    Status,
    SubmissionKind,
    effective_status,
    is_unread,
)


def to_datetime(value: Any) -> Optional[datetime]:
    """Coerce a stored timestamp (datetime, ISO string, epoch) to an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp value: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class Submission(BaseModel):
    """Common shape of applications and inquiries."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    kind: ClassVar[SubmissionKind]

    id: str
    created_at: datetime
    status: Status
    email: str = ""
    full_name: str = ""
    phone: Optional[str] = None
    last_viewed: Optional[datetime] = None

    @computed_field
    @property
    def unread(self) -> bool:
        return is_unread(self.status)

    @property
    def contact_email(self) -> str:
        """Reply target."""
        return self.email

    def with_status(self, status: Status, viewed_at: Optional[datetime] = None) -> "Submission":
        return self.model_copy(update={"status": status, "last_viewed": viewed_at})

    @classmethod
    def _common_fields(cls, doc_id: str, data: dict, now: datetime) -> dict:
        return {
            "id": doc_id,
            "created_at": to_datetime(data.get("createdAt")) or now,
            "status": effective_status(cls.kind, data.get("status")),
            "email": data.get("email") or "",
            "phone": data.get("phone"),
            "last_viewed": to_datetime(data.get("lastViewed")),
        }


class Application(Submission):
    """A job application submitted through the careers form."""

    kind: ClassVar[SubmissionKind] = SubmissionKind.APPLICATIONS

    status: ApplicationStatus = ApplicationStatus.NEW
    availability: Optional[str] = None
    references: Optional[str] = None
    education_background: Optional[str] = None
    contact_information: Optional[str] = None
    resume_url: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict, now: Optional[datetime] = None) -> "Application":
        now = now or datetime.now(timezone.utc)
        fields = cls._common_fields(doc_id, data, now)
        return cls(
            **fields,
            full_name=data.get("fullName") or "",
            availability=data.get("availability"),
            references=data.get("references"),
            education_background=data.get("education") or data.get("educationBackground"),
            contact_information=data.get("contactInformation") or data.get("phone"),
            resume_url=data.get("resume") or data.get("resumeUrl"),
        )


class Inquiry(Submission):
    """A message sent through the contact form."""

    kind: ClassVar[SubmissionKind] = SubmissionKind.INQUIRIES

    status: InquiryStatus = InquiryStatus.NEW
    message: str = ""

    @classmethod
    def from_document(cls, doc_id: str, data: dict, now: Optional[datetime] = None) -> "Inquiry":
        now = now or datetime.now(timezone.utc)
        fields = cls._common_fields(doc_id, data, now)
        return cls(
            **fields,
            full_name=data.get("fullName") or data.get("name") or "",
            message=data.get("message") or "",
        )


RECORD_TYPES = {
    SubmissionKind.APPLICATIONS: Application,
    SubmissionKind.INQUIRIES: Inquiry,
}


def record_from_document(kind: SubmissionKind, doc_id: str, data: dict,
                         now: Optional[datetime] = None) -> Submission:
    return RECORD_TYPES[kind].from_document(doc_id, data, now)
