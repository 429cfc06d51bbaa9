"""
Services package for the watershed plan extraction application.

Contains:
- pdf_service: PDF validation and text extraction
- text_normalizer: Text cleanup and page reconstruction
- ai: Provider gateway and extraction orchestration
- export_service: JSON, CSV and Excel export
"""

from .export_service import ExportService
from .pdf_service import PDFService

__all__ = ["PDFService", "ExportService"]
