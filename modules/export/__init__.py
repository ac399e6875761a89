"""PDF export of job applications."""

from .pdf import pdf_filename, render_application_pdf

__all__ = ["pdf_filename", "render_application_pdf"]
