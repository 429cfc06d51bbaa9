"""
Router for report export endpoints.

Handles:
- Rendering a report as JSON, CSV or Excel
- Listing supported formats
"""

import logging

from fastapi import APIRouter, Depends, Response

# Handle both package imports and standalone imports
try:
    from ..models import ExportFormatsResponse, ExportRequest
    from ..services.export_service import (
        EXPORT_FORMATS,
        ExportService,
        export_filename,
        get_export_service,
    )
except ImportError:
    from models import ExportFormatsResponse, ExportRequest
    from services.export_service import (
        EXPORT_FORMATS,
        ExportService,
        export_filename,
        get_export_service,
    )

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/export", tags=["export"])


@router.post("")
async def export_report(
    request: ExportRequest,
    export_service: ExportService = Depends(get_export_service),
) -> Response:
    """Render a report in the requested format as a file download."""
    content = export_service.export(request.data, request.format)
    filename = export_filename(request.data, request.format)

    logger.info("Export completed: %s (%d bytes)", filename, len(content))

    return Response(
        content=content,
        media_type=EXPORT_FORMATS[request.format].mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


@router.get("/formats", response_model=ExportFormatsResponse)
async def list_export_formats() -> ExportFormatsResponse:
    """List supported export formats."""
    return ExportFormatsResponse(formats=list(EXPORT_FORMATS.values()))
