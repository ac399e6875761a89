"""Reply drafts: validation, the composer state and HTML rendering."""
import re
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from modules.submissions.errors import ReplyValidationError

TEMPLATE_DIR = Path(__file__).parent / "templates"

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_jinja = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)


@dataclass(frozen=True)
class ReplyDraft:
    """A validated reply ready to send."""

    to: str
    subject: str
    message: str

    def render_html(self) -> str:
        return render_reply_html(self.message)


def validate_reply(to: str, subject: str, message: str) -> ReplyDraft:
    """Check the reply fields; nothing is sent when this raises."""
    to = (to or "").strip()
    subject = (subject or "").strip()
    message = (message or "").strip()

    if not to:
        raise ReplyValidationError("to", "Recipient address is required")
    if not EMAIL_RE.match(to):
        raise ReplyValidationError("to", "Invalid email address format")
    if not subject:
        raise ReplyValidationError("subject", "Subject is required")
    if not message:
        raise ReplyValidationError("message", "Message is required")
    return ReplyDraft(to=to, subject=subject, message=message)


def render_reply_html(message: str) -> str:
    """Wrap a plain-text message in HTML, keeping its line breaks."""
    template = _jinja.get_template("reply.html")
    return template.render(lines=message.splitlines() or [""])


@dataclass
class ReplyComposer:
    """Composer bound to one submission's detail view.

    Fields survive failed sends so the actor can retry; only a successful
    send clears them.
    """

    to: str
    subject: str = ""
    message: str = ""

    def draft(self) -> ReplyDraft:
        return validate_reply(self.to, self.subject, self.message)

    def clear(self) -> None:
        self.subject = ""
        self.message = ""
