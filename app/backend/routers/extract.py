"""
Router for PDF extraction endpoints.

Handles:
- Upload validation (extension, content type, size, PDF structure)
- Text extraction, normalization and LLM extraction
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

# Handle both package imports and standalone imports
try:
    from ..config import Settings, get_settings
    from ..models import ExtractedReport, ExtractionOptions, Provider
    from ..services.ai import ExtractionService, get_extraction_service
    from ..services.pdf_service import PDFService, get_pdf_service, validate_pdf_upload
    from ..services.text_normalizer import normalize_document
except ImportError:
    from config import Settings, get_settings
    from models import ExtractedReport, ExtractionOptions, Provider
    from services.ai import ExtractionService, get_extraction_service
    from services.pdf_service import PDFService, get_pdf_service, validate_pdf_upload
    from services.text_normalizer import normalize_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["extract"])

PDF_CONTENT_TYPE = "application/pdf"


@router.post("/extract", response_model=ExtractedReport)
async def extract_pdf(
    pdf: Annotated[UploadFile, File(description="Watershed plan PDF")],
    model: Annotated[
        Provider | None,
        Form(description="Provider to try first (openai or anthropic)"),
    ] = None,
    allow_fallback: Annotated[
        bool,
        Form(description="Try other configured providers if the first fails"),
    ] = True,
    temperature: Annotated[
        float,
        Form(ge=0.0, le=2.0, description="Sampling temperature"),
    ] = 0.1,
    settings: Settings = Depends(get_settings),
    pdf_service: PDFService = Depends(get_pdf_service),
    extraction_service: ExtractionService = Depends(get_extraction_service),
) -> ExtractedReport:
    """
    Extract a structured report from an uploaded watershed plan.

    The PDF's text layer is cleaned and split into marked pages, then sent to
    the preferred LLM provider with fallback to the others.
    """
    try:
        if not pdf.filename:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No filename provided",
            )

        if not pdf.filename.lower().endswith(".pdf"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only PDF files are accepted",
            )

        if pdf.content_type != PDF_CONTENT_TYPE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid content type '{pdf.content_type}'. Only PDF files are allowed.",
            )

        file_bytes = await pdf.read()
        if len(file_bytes) > settings.max_file_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum size is {settings.max_file_size // (1024 * 1024)}MB",
            )

        validate_pdf_upload(file_bytes)

        logger.info("Processing PDF: %s (%d bytes)", pdf.filename, len(file_bytes))

        raw = pdf_service.extract_text(file_bytes)
        normalized = normalize_document(raw.text, raw.page_count)

        options = ExtractionOptions(
            preferred_provider=model,
            temperature=temperature,
            allow_fallback=allow_fallback,
        )
        return await extraction_service.extract(
            normalized,
            file_name=pdf.filename,
            file_size=len(file_bytes),
            options=options,
        )
    finally:
        await pdf.close()
