"""Tests for PDF service."""

import io

import pytest
from conftest import build_pdf

from app.backend.services.pdf_service import (
    CorruptedPDFError,
    EmptyPDFError,
    InvalidPDFError,
    PasswordProtectedPDFError,
    PDFProcessingError,
    PDFService,
    get_pdf_service,
    validate_pdf_upload,
)


class TestValidatePdfUpload:
    """Tests for validate_pdf_upload."""

    def test_valid_pdf_passes(self, text_pdf_bytes: bytes):
        validate_pdf_upload(text_pdf_bytes)

    def test_empty_file_raises(self):
        with pytest.raises(EmptyPDFError):
            validate_pdf_upload(b"")

    def test_missing_signature_raises(self, invalid_file_bytes: bytes):
        with pytest.raises(InvalidPDFError) as exc_info:
            validate_pdf_upload(invalid_file_bytes)
        assert "PDF header" in str(exc_info.value)

    def test_encrypted_pdf_raises(self, encrypted_pdf_bytes: bytes):
        with pytest.raises(PasswordProtectedPDFError):
            validate_pdf_upload(encrypted_pdf_bytes)

    def test_errors_share_base_class(self):
        for error in (InvalidPDFError, PasswordProtectedPDFError, CorruptedPDFError, EmptyPDFError):
            assert issubclass(error, PDFProcessingError)


class TestPDFService:
    """Tests for PDFService class."""

    def test_init_default_values(self):
        assert PDFService().page_separator == "\n\n"

    def test_extract_text(self, text_pdf_bytes: bytes):
        document = PDFService().extract_text(text_pdf_bytes)
        assert document.page_count == 2
        assert "Watershed Plan" in document.text
        assert "Streambank stabilization" in document.text

    def test_extract_text_from_file_object(self, text_pdf_bytes: bytes):
        document = PDFService().extract_text(io.BytesIO(text_pdf_bytes))
        assert document.page_count == 2

    def test_pages_joined_with_separator(self):
        pdf = build_pdf(["first page", "second page"])
        document = PDFService(page_separator="<PAGE>").extract_text(pdf)
        assert "<PAGE>" in document.text
        assert document.text.index("first") < document.text.index("second")

    def test_get_page_count(self, text_pdf_bytes: bytes):
        assert PDFService().get_page_count(text_pdf_bytes) == 2

    def test_blank_pdf_raises_empty(self, blank_pdf_bytes: bytes):
        with pytest.raises(EmptyPDFError):
            PDFService().extract_text(blank_pdf_bytes)

    def test_empty_bytes_raise_empty(self):
        with pytest.raises(EmptyPDFError):
            PDFService().extract_text(b"")

    def test_encrypted_pdf_raises(self, encrypted_pdf_bytes: bytes):
        with pytest.raises(PasswordProtectedPDFError):
            PDFService().extract_text(encrypted_pdf_bytes)

    def test_corrupted_pdf_raises(self):
        with pytest.raises(CorruptedPDFError):
            PDFService().extract_text(b"%PDF-1.4\nthis is not really a pdf body")

    def test_singleton(self):
        assert get_pdf_service() is get_pdf_service()
