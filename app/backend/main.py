"""
FastAPI application for watershed plan extraction.

Provides endpoints for:
- Extracting structured reports from watershed plan PDFs
- Exporting reports as JSON, CSV or Excel
- Health checks
"""

import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Handle both package imports (when running as module) and standalone imports (uvicorn main:app)
try:
    from .config import get_settings
    from .models import HealthResponse
    from .routers import export, extract, health
    from .services.ai import AIServiceError, ExtractionExhaustedError
    from .services.pdf_service import CorruptedPDFError, PDFProcessingError, get_pdf_service
    from .services.text_normalizer import EmptyDocumentError
except ImportError:
    import sys
    from pathlib import Path
    # Add parent directory to path for standalone imports
    backend_dir = Path(__file__).parent
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))
    from config import get_settings
    from models import HealthResponse
    from routers import export, extract, health
    from services.ai import AIServiceError, ExtractionExhaustedError
    from services.pdf_service import CorruptedPDFError, PDFProcessingError, get_pdf_service
    from services.text_normalizer import EmptyDocumentError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting Watershed Plan Extraction Service...")
    get_pdf_service()
    configured = settings.configured_providers
    if configured:
        logger.info("LLM providers configured: %s", ", ".join(configured))
    else:
        logger.warning(
            "No LLM provider configured. Set OPENAI_API_KEY or ANTHROPIC_API_KEY in .env."
        )
    yield
    logger.info("Shutting down Watershed Plan Extraction Service...")


# Create FastAPI application
app = FastAPI(
    title="Watershed Plan Extraction API",
    description="Structured data extraction from watershed plan PDFs using LLMs",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Root endpoint - health check."""
    return health.build_health(settings)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health.router)
app.include_router(extract.router)
app.include_router(export.router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(PDFProcessingError)
async def pdf_processing_error_handler(request: Request, exc: PDFProcessingError):
    """Handle unusable uploads: 422 for unreadable structure, 400 otherwise."""
    status_code = (
        status.HTTP_422_UNPROCESSABLE_ENTITY
        if isinstance(exc, CorruptedPDFError)
        else status.HTTP_400_BAD_REQUEST
    )
    logger.warning("Rejected PDF upload: %s", exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(EmptyDocumentError)
async def empty_document_error_handler(request: Request, exc: EmptyDocumentError):
    """Handle documents whose text is empty after cleanup."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(ExtractionExhaustedError)
async def extraction_exhausted_error_handler(request: Request, exc: ExtractionExhaustedError):
    """Handle extractions where every provider failed."""
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": str(exc),
            "errors": [error.model_dump(mode="json") for error in exc.errors],
        },
    )


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
    """Handle AI service errors."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )
