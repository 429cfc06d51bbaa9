"""
Extraction orchestration: plan providers, attempt them in order, and turn
the first successful response into an ExtractedReport.

Providers are tried sequentially. The first success short-circuits; if every
planned attempt fails the collected reasons are raised together.
"""

import logging
import math
import time
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

# Handle both package imports and standalone imports
try:
    from ...config import Settings, get_settings
    from ...models import (
        REPORT_CATEGORIES,
        ExtractedReport,
        ExtractionOptions,
        GoalStatus,
        NormalizedText,
        Provider,
        ProviderAttemptError,
        ReportMetadata,
        ReportSummary,
    )
    from ..text_normalizer import normalize_document
except ImportError:
    from config import Settings, get_settings
    from models import (
        REPORT_CATEGORIES,
        ExtractedReport,
        ExtractionOptions,
        GoalStatus,
        NormalizedText,
        Provider,
        ProviderAttemptError,
        ReportMetadata,
        ReportSummary,
    )
    from services.text_normalizer import normalize_document

from .exceptions import AIServiceError, ExtractionExhaustedError, ProviderError
from .prompts import build_extraction_prompt
from .providers import LLMProvider, build_providers
from .validation import coerce_records

logger = logging.getLogger(__name__)


def completion_rate(goals: Sequence[Any]) -> int:
    """Percentage of goals marked completed, rounded half up; 0 without goals."""
    if not goals:
        return 0
    completed = sum(1 for goal in goals if goal.status == GoalStatus.COMPLETED)
    return math.floor(100 * completed / len(goals) + 0.5)


class ExtractionService:
    """
    Runs a normalized document through the configured LLM providers.

    Args:
        settings: Application settings; read once to build providers.
        providers: Explicit provider list (tests, custom wiring). Built from
            settings when omitted.

    Raises:
        AIServiceError: If no provider is configured.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        providers: Sequence[LLMProvider] | None = None,
    ):
        if providers is None:
            providers = build_providers(settings or get_settings())
        self.providers: dict[Provider, LLMProvider] = {p.name: p for p in providers}

        if not self.providers:
            raise AIServiceError(
                "No AI provider configured. Set OPENAI_API_KEY or ANTHROPIC_API_KEY."
            )

        logger.info(
            "Extraction service ready with providers: %s",
            ", ".join(p.value for p in self.providers),
        )

    def plan_providers(
        self,
        preferred: Provider | None = None,
        allow_fallback: bool = True,
    ) -> list[LLMProvider]:
        """
        Decide which providers to try, in order.

        A single configured provider is always the whole plan. Otherwise the
        preferred provider (OpenAI by default) goes first, followed by the
        rest when fallback is allowed.
        """
        configured = list(self.providers.values())
        if len(configured) == 1:
            return configured

        first = preferred or Provider.OPENAI
        if first not in self.providers:
            logger.warning("Preferred provider %s is not configured", first.value)
            first = configured[0].name

        plan = [self.providers[first]]
        if allow_fallback:
            plan.extend(p for p in configured if p.name != first)
        return plan

    async def extract(
        self,
        normalized: NormalizedText,
        file_name: str,
        file_size: int,
        options: ExtractionOptions | None = None,
    ) -> ExtractedReport:
        """
        Extract a structured report from normalized document text.

        Args:
            normalized: Output of the text normalizer.
            file_name: Original upload name, recorded in metadata.
            file_size: Upload size in bytes, recorded in metadata.
            options: Provider preference, temperature and token budget.

        Returns:
            The validated report.

        Raises:
            ExtractionExhaustedError: If every planned provider failed.
        """
        options = options or ExtractionOptions()
        started = time.perf_counter()

        prompt = build_extraction_prompt(normalized.combined_text, normalized.page_texts)
        plan = self.plan_providers(options.preferred_provider, options.allow_fallback)
        logger.info(
            "Extracting '%s' (%d pages, prompt %d chars), plan: %s",
            file_name,
            len(normalized.page_texts),
            len(prompt),
            " -> ".join(p.name.value for p in plan),
        )

        errors: list[ProviderAttemptError] = []
        for provider in plan:
            try:
                data = await provider.invoke(prompt, options)
            except ProviderError as e:
                logger.warning("Provider %s failed: %s", provider.name.value, e.message)
                errors.append(ProviderAttemptError(provider=provider.name, message=e.message))
                continue

            elapsed_ms = int((time.perf_counter() - started) * 1000)
            report = self._structure_response(
                data,
                file_name=file_name,
                file_size=file_size,
                processing_method=provider.processing_method,
                processing_time=elapsed_ms,
            )
            logger.info(
                "Extraction of '%s' succeeded with %s in %d ms",
                file_name,
                provider.processing_method,
                elapsed_ms,
            )
            return report

        logger.error("All providers failed for '%s'", file_name)
        raise ExtractionExhaustedError(errors)

    async def extract_from_text(
        self,
        raw_text: str,
        page_count: int,
        file_name: str,
        file_size: int,
        options: ExtractionOptions | None = None,
    ) -> ExtractedReport:
        """Normalize raw PDF text, then extract. Empty text fails before any provider call."""
        normalized = normalize_document(raw_text, page_count)
        return await self.extract(normalized, file_name, file_size, options)

    def _structure_response(
        self,
        data: dict[str, Any],
        file_name: str,
        file_size: int,
        processing_method: str,
        processing_time: int,
    ) -> ExtractedReport:
        """Validate provider JSON into the canonical report."""
        seen_ids: set[str] = set()
        categories = {
            category: coerce_records(category, data.get(category), seen_ids)
            for category in REPORT_CATEGORIES
        }

        summary = ReportSummary(
            total_goals=len(categories["goals"]),
            total_bmps=len(categories["bmps"]),
            completion_rate=completion_rate(categories["goals"]),
            processing_time=processing_time,
        )
        metadata = ReportMetadata(
            file_name=file_name,
            file_size=file_size,
            extracted_at=datetime.now(timezone.utc),
            processing_method=processing_method,
        )

        return ExtractedReport(
            summary=summary,
            goals=categories["goals"],
            bmps=categories["bmps"],
            implementation=categories["implementation"],
            monitoring=categories["monitoring"],
            outreach=categories["outreach"],
            geographic_areas=categories["geographicAreas"],
            metadata=metadata,
        )
