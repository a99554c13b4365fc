import io
import logging
from pypdf import PdfReader

from .errors import ValidationError

logger = logging.getLogger(__name__)


def is_pdf_filename(filename: str | None) -> bool:
    return bool(filename) and filename.lower().endswith(".pdf")


def extract_pdf_text(data: bytes) -> str:
    """Return the trimmed text of every page of a PDF, joined by newlines.

    Raises ValidationError when the document has no extractable text
    (e.g. a scanned image). pypdf errors on corrupt input propagate.
    """
    reader = PdfReader(io.BytesIO(data))
    pages = [page.extract_text() or "" for page in reader.pages]
    text = "\n".join(pages).strip()
    logger.info(f"Extracted {len(text)} chars from {len(pages)} PDF page(s)")
    if not text:
        raise ValidationError("Could not extract text from PDF")
    return text
