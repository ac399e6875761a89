"""Request/response models for the dashboard API."""

from typing import Optional

from pydantic import BaseModel, Field

from modules.submissions import Notice


class CountsModel(BaseModel):
    total: int = 0
    unread: int = 0


class SubmissionList(BaseModel):
    """GET /api/{kind} response."""
    kind: str
    state: str = Field(description="loading | ready | error")
    error: Optional[str] = None
    counts: CountsModel
    matching: int = 0
    updating: list[str] = []
    items: list[dict] = []
    rejected: list[dict] = Field(default=[], description="unreadable documents left out")


class DetailResponse(BaseModel):
    """Open detail view."""
    submission: dict
    confirmed: bool = True
    transitioned: bool = False
    updating: bool = False
    quick_actions: list[str] = []
    notice: Optional[Notice] = None


class StatusUpdate(BaseModel):
    """PATCH /api/{kind}/{id}/status request body."""
    status: str


class StatusResponse(BaseModel):
    id: str
    status: str
    detail: Optional[DetailResponse] = None


class ReplyRequest(BaseModel):
    """POST /api/{kind}/{id}/reply request body."""
    subject: str = ""
    message: str = ""


class DraftModel(BaseModel):
    to: str
    subject: str
    message: str


class ReplyResponse(BaseModel):
    submission: dict
    transitioned: bool = False
    notice: Optional[Notice] = None
    draft: DraftModel
    receipt: Optional[dict] = None
