"""Plain-text extraction from uploaded file bytes.

Text files are decoded as UTF-8 (undecodable bytes become U+FFFD).  PDFs
go through PyMuPDF page by page.  Images carry no extractable text here;
their description comes from the vision model instead.
"""

from __future__ import annotations

import fitz  # PyMuPDF
import structlog

from clipvault.models.clip import FileType
from clipvault.utils.errors import ValidationError

logger = structlog.get_logger(logger_name=__name__)


def extract_text(file_type: FileType, data: bytes) -> str | None:
    """Return the plain text of *data*, or ``None`` for images.

    Raises:
        ValidationError: If a PDF cannot be opened.
    """
    if file_type is FileType.IMAGE:
        return None
    if file_type is FileType.PDF:
        return _extract_pdf_text(data)
    return data.decode("utf-8", errors="replace")


def _extract_pdf_text(data: bytes) -> str:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise ValidationError(message=f"Unreadable PDF: {exc}") from exc

    pages: list[str] = []
    try:
        for page in doc:
            text = page.get_text("text").strip()
            if text:
                pages.append(text)
    finally:
        doc.close()

    if not pages:
        logger.warning("pdf_no_text_extracted", size=len(data))
    return "\n\n".join(pages)
