"""
PDF processing service using pypdf.

Validates uploaded PDF bytes and extracts their text layer for the
extraction pipeline.
"""

import io
import logging
from typing import BinaryIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

# Handle both package imports and standalone imports
try:
    from ..models import RawDocument
except ImportError:
    from models import RawDocument

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"
ENCRYPT_MARKER = b"/Encrypt"


class PDFProcessingError(Exception):
    """Raised when a PDF cannot be processed."""

    pass


class InvalidPDFError(PDFProcessingError):
    """The upload is not a PDF file."""


class PasswordProtectedPDFError(PDFProcessingError):
    """The PDF is encrypted."""


class CorruptedPDFError(PDFProcessingError):
    """The PDF structure could not be read."""


class EmptyPDFError(PDFProcessingError):
    """The PDF is empty or has no extractable text."""


def _as_bytes(file_bytes: bytes | BinaryIO) -> bytes:
    if hasattr(file_bytes, "read"):
        return file_bytes.read()
    return file_bytes


def validate_pdf_upload(file_bytes: bytes) -> None:
    """
    Cheap structural checks on raw upload bytes, before parsing.

    Raises:
        EmptyPDFError: If there are no bytes.
        InvalidPDFError: If the PDF signature is missing.
        PasswordProtectedPDFError: If the document declares encryption.
    """
    if not file_bytes:
        raise EmptyPDFError("Empty PDF file provided")

    if not file_bytes.startswith(PDF_SIGNATURE):
        raise InvalidPDFError("Invalid PDF file: does not start with PDF header")

    if ENCRYPT_MARKER in file_bytes:
        raise PasswordProtectedPDFError(
            "Password-protected PDFs are not supported. Please remove the password and try again."
        )


class PDFService:
    """
    Service for PDF processing operations.

    Uses pypdf to read the text layer of each page. Scanned documents
    without a text layer are rejected rather than OCR'd.
    """

    def __init__(self, page_separator: str = "\n\n"):
        """
        Initialize the PDF service.

        Args:
            page_separator: String placed between the text of consecutive pages.
        """
        self.page_separator = page_separator

    def _open(self, pdf_bytes: bytes) -> PdfReader:
        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
        except PdfReadError as e:
            logger.error("PDF read error: %s", e)
            raise CorruptedPDFError(f"Invalid or corrupted PDF file: {e}") from e
        except Exception as e:
            logger.exception("Unexpected error opening PDF")
            raise CorruptedPDFError(f"Could not open PDF file: {e}") from e

        if reader.is_encrypted:
            raise PasswordProtectedPDFError(
                "Password-protected PDFs are not supported. Please remove the password and try again."
            )
        return reader

    def get_page_count(self, file_bytes: bytes | BinaryIO) -> int:
        """
        Get the number of pages in a PDF.

        Raises:
            PDFProcessingError: If the PDF cannot be read.
        """
        reader = self._open(_as_bytes(file_bytes))
        return len(reader.pages)

    def extract_text(self, file_bytes: bytes | BinaryIO) -> RawDocument:
        """
        Extract the text of every page.

        Args:
            file_bytes: PDF file as bytes or file-like object.

        Returns:
            RawDocument with pages joined by ``page_separator`` and the page count.

        Raises:
            CorruptedPDFError: If pypdf cannot parse the document.
            PasswordProtectedPDFError: If the document is encrypted.
            EmptyPDFError: If no page yields any text.
        """
        pdf_bytes = _as_bytes(file_bytes)
        if not pdf_bytes:
            raise EmptyPDFError("Empty PDF file provided")

        reader = self._open(pdf_bytes)
        page_count = len(reader.pages)
        logger.info("Extracting text from %d page(s)", page_count)

        page_texts: list[str] = []
        for index, page in enumerate(reader.pages, start=1):
            try:
                page_texts.append(page.extract_text() or "")
            except PdfReadError as e:
                logger.error("Failed to read page %d: %s", index, e)
                raise CorruptedPDFError(f"Could not read page {index}: {e}") from e

        text = self.page_separator.join(page_texts)
        if not text.strip():
            raise EmptyPDFError(
                "PDF contains no extractable text. Scanned documents are not supported."
            )

        logger.info("Extracted %d characters from %d page(s)", len(text), page_count)
        return RawDocument(text=text, page_count=page_count)


# Singleton instance for dependency injection
_pdf_service: PDFService | None = None


def get_pdf_service() -> PDFService:
    """Get or create the PDF service singleton."""
    global _pdf_service
    if _pdf_service is None:
        _pdf_service = PDFService()
    return _pdf_service
