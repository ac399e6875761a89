"""
Mail Module
===========
Staff replies to applications and inquiries.

Usage:
    from modules.mail import ResendClient, ReplyComposer

    client = ResendClient(config.mail)
    composer = ReplyComposer(to="jane@example.com", subject="Re: your inquiry", message="...")
    draft = composer.draft()
    await client.send(draft.to, draft.subject, draft.render_html())
"""

from .client import (
    FAILURE_MESSAGES,
    MailClient,
    ResendClient,
    SendFailureReason,
    SendReceipt,
    classify_response,
)
from .reply import ReplyComposer, ReplyDraft, render_reply_html, validate_reply

__all__ = [
    "FAILURE_MESSAGES",
    "MailClient",
    "ResendClient",
    "SendFailureReason",
    "SendReceipt",
    "classify_response",
    "ReplyComposer",
    "ReplyDraft",
    "render_reply_html",
    "validate_reply",
]
