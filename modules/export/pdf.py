"""Application → PDF export.

One A4 document per application: header, submission date, status, personal
information, education, references, resume link, generated-on footer.
Rendering is a pure function of the record.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from fpdf import FPDF

from modules.submissions.errors import ExportError
from modules.submissions.models import Application

logger = logging.getLogger(__name__)

MARGIN = 20
PAGE_W = 210
CONTENT_W = PAGE_W - 2 * MARGIN
DATE_FORMAT = "%B %d, %Y at %I:%M %p"


def _latin1(text) -> str:
    """Core PDF fonts only cover latin-1."""
    return str(text).encode("latin-1", "replace").decode("latin-1")


class ApplicationPDF(FPDF):
    def __init__(self, generated_at: datetime):
        super().__init__(format="A4")
        self.generated_at = generated_at
        self.set_margins(MARGIN, MARGIN, MARGIN)
        self.set_auto_page_break(auto=True, margin=20)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "", 9)
        self.set_text_color(128, 128, 128)
        self.cell(0, 8, f"Generated on {self.generated_at.strftime(DATE_FORMAT)}", align="C")


def heading(pdf, text, size=16):
    pdf.set_font("Helvetica", "B", size)
    pdf.set_text_color(48, 73, 95)
    pdf.cell(0, size * 0.6, _latin1(text), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(2)


def line(pdf, text, bold=False, size=12):
    pdf.set_font("Helvetica", "B" if bold else "", size)
    pdf.set_text_color(40, 40, 40)
    pdf.multi_cell(CONTENT_W, 6, _latin1(text), new_x="LMARGIN", new_y="NEXT")


def section(pdf, title, body: Optional[str]):
    if not body:
        return
    heading(pdf, title)
    line(pdf, body)
    pdf.ln(6)


def pdf_filename(application: Application) -> str:
    slug = re.sub(r"\s+", "-", application.full_name.strip())
    return f"application-{slug}.pdf"


def render_application_pdf(
    application: Application,
    organisation: str = "Golden Serenity",
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Render one application; raises ExportError on any failure."""
    if not application.full_name:
        raise ExportError("Missing application data")

    generated_at = generated_at or datetime.now(timezone.utc)
    try:
        pdf = ApplicationPDF(generated_at)
        pdf.add_page()

        heading(pdf, f"{organisation} Job Application", size=22)
        line(pdf, f"Submitted: {application.created_at.strftime(DATE_FORMAT)}", size=13)
        pdf.ln(3)
        line(pdf, f"Status: {application.status.value.upper()}", bold=True)
        pdf.ln(8)

        heading(pdf, "Personal Information")
        line(pdf, f"Full Name: {application.full_name}")
        line(pdf, f"Email: {application.email}")
        line(pdf, f"Phone: {application.phone or 'Not provided'}")
        line(pdf, f"Availability: {application.availability or 'Not specified'}")
        line(pdf, f"Contact Info: {application.contact_information or 'N/A'}")
        pdf.ln(8)

        section(pdf, "Education Background", application.education_background)
        section(pdf, "References", application.references)
        section(pdf, "Resume", application.resume_url)

        data = bytes(pdf.output())
    except Exception as e:
        logger.error(f"PDF export failed for application {application.id}: {e}")
        raise ExportError("Failed to generate PDF") from e

    logger.info(f"Exported application {application.id} ({len(data)} bytes)")
    return data
