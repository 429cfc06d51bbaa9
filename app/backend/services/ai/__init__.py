"""
AI service package for watershed plan extraction.

This package provides modular AI functionality split into:
- prompts: Extraction prompt construction
- providers: OpenAI and Anthropic gateways behind one interface
- repair: JSON recovery for raw model output
- validation: Record validation and normalization
- extraction: Provider planning, fallback and report assembly
"""

import logging

# Handle both package imports and standalone imports
try:
    from ...config import get_settings
except ImportError:
    from config import get_settings

from .exceptions import AIServiceError, ExtractionExhaustedError, ProviderError
from .extraction import ExtractionService, completion_rate
from .prompts import build_extraction_prompt
from .providers import AnthropicProvider, LLMProvider, OpenAIProvider, build_providers
from .repair import extract_json_region, parse_json_with_repair
from .validation import coerce_records, parse_date, parse_number

logger = logging.getLogger(__name__)

__all__ = [
    "AIServiceError",
    "AnthropicProvider",
    "ExtractionExhaustedError",
    "ExtractionService",
    "LLMProvider",
    "OpenAIProvider",
    "ProviderError",
    "build_extraction_prompt",
    "build_providers",
    "coerce_records",
    "completion_rate",
    "extract_json_region",
    "get_extraction_service",
    "parse_date",
    "parse_json_with_repair",
    "parse_number",
]


# =============================================================================
# Singleton Factory
# =============================================================================

_extraction_service: ExtractionService | None = None


def get_extraction_service() -> ExtractionService:
    """
    Get or create the extraction service singleton.

    Raises:
        AIServiceError: If no provider is configured. Nothing is cached in
            that case.
    """
    global _extraction_service
    if _extraction_service is None:
        _extraction_service = ExtractionService(get_settings())
    return _extraction_service
