"""Outbound email via the Resend HTTP API.

Lightweight: one POST per message over httpx, no SDK.

Environment variables:
  RESEND_API_KEY    API key (required to send)
  MAIL_FROM         sender, e.g. "Golden Serenity <info@example.org>"
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field

from modules.submissions.errors import SendError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class SendFailureReason(str, Enum):
    """Why a message was not delivered."""

    INVALID_RECIPIENT = "invalid-recipient"
    RATE_LIMITED = "rate-limited"
    SERVICE_UNAVAILABLE = "service-unavailable"
    CONFIGURATION = "configuration"


FAILURE_MESSAGES = {
    SendFailureReason.INVALID_RECIPIENT: "The recipient address was rejected.",
    SendFailureReason.RATE_LIMITED: "Rate limit exceeded. Please try again later.",
    SendFailureReason.SERVICE_UNAVAILABLE: "Email service is unavailable. Please try again later.",
    SendFailureReason.CONFIGURATION: "Email service configuration error.",
}


class SendReceipt(BaseModel):
    """Provider metadata for a delivered message."""

    id: Optional[str] = None
    to: str
    subject: str
    sent_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@runtime_checkable
class MailClient(Protocol):
    """Anything that can send an HTML email."""

    async def send(self, to: str, subject: str, html: str) -> SendReceipt:
        """Deliver one message; raises SendError with a reason on failure."""
        ...


def classify_response(status_code: int) -> SendFailureReason:
    """Map a provider HTTP status to a failure reason."""
    if status_code == 429:
        return SendFailureReason.RATE_LIMITED
    if status_code in (401, 403):
        return SendFailureReason.CONFIGURATION
    if status_code in (400, 422):
        return SendFailureReason.INVALID_RECIPIENT
    return SendFailureReason.SERVICE_UNAVAILABLE


class ResendClient:
    """Resend API client."""

    def __init__(self, config):
        self.config = config

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key) and bool(self.config.sender)

    async def send(self, to: str, subject: str, html: str) -> SendReceipt:
        if not self.is_configured:
            raise SendError(
                SendFailureReason.CONFIGURATION.value,
                FAILURE_MESSAGES[SendFailureReason.CONFIGURATION],
            )

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_s) as client:
                resp = await client.post(
                    self.config.api_url,
                    headers={"Authorization": f"Bearer {self.config.api_key}"},
                    json={
                        "from": self.config.sender,
                        "to": [to],
                        "subject": subject,
                        "html": html,
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Email send to {to} failed: {e.__class__.__name__}: {e}")
            raise SendError(
                SendFailureReason.SERVICE_UNAVAILABLE.value,
                FAILURE_MESSAGES[SendFailureReason.SERVICE_UNAVAILABLE],
            ) from e

        if resp.status_code < 300:
            body = _json_or_empty(resp)
            logger.info(f"Email sent to {to} (id={body.get('id')})")
            return SendReceipt(id=body.get("id"), to=to, subject=subject)

        reason = classify_response(resp.status_code)
        detail = _json_or_empty(resp).get("message")
        logger.warning(
            f"Email send to {to} rejected: HTTP {resp.status_code} "
            f"({reason.value}) {detail or ''}".rstrip()
        )
        message = FAILURE_MESSAGES[reason]
        if reason is SendFailureReason.INVALID_RECIPIENT and detail:
            message = detail
        raise SendError(reason.value, message, status_code=resp.status_code)


def _json_or_empty(resp) -> dict:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
