"""
Pydantic models for the watershed plan extraction pipeline.

Defines the canonical report returned to callers (six record categories plus
summary and metadata), the transient documents that flow through the
pipeline, and the request/response models of the HTTP API.

Report models serialize with the camelCase names the frontend consumes
(``totalBMPs``, ``geographicAreas``...) and accept either spelling on input.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NOT_SPECIFIED = "Not specified"
EXTRACTION_ACCURACY_PLACEHOLDER = 85


class Provider(str, Enum):
    """LLM providers the extraction pipeline can call."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class GoalStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityStatus(str, Enum):
    PLANNED = "planned"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class AreaType(str, Enum):
    WATERSHED = "watershed"
    COUNTY = "county"
    REGION = "region"
    STATE = "state"


class ExportFormat(str, Enum):
    """Supported export formats."""

    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Pipeline Documents
# =============================================================================


class RawDocument(BaseModel):
    """Text pulled out of an uploaded PDF, before any cleanup."""

    text: str = Field(..., description="Full extracted text")
    page_count: int = Field(..., ge=0, description="Page count reported by the PDF")


class NormalizedText(BaseModel):
    """
    Cleaned document text ready for prompting.

    Attributes:
        combined_text: All page segments, each prefixed with a page marker.
        page_texts: One cleaned segment per declared page.
    """

    model_config = ConfigDict(frozen=True)

    combined_text: str
    page_texts: tuple[str, ...]


class ExtractionOptions(BaseModel):
    """
    Caller-supplied options for a single extraction.

    Attributes:
        preferred_provider: Provider to try first (defaults to OpenAI).
        temperature: Sampling temperature sent to every provider.
        max_tokens: Output token budget; None uses the provider default.
        allow_fallback: Try the other configured providers if the first fails.
    """

    model_config = ConfigDict(frozen=True)

    preferred_provider: Provider | None = None
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)
    allow_fallback: bool = True


class ProviderAttemptError(BaseModel):
    """Why one provider attempt failed during an extraction."""

    provider: Provider
    message: str

    def __str__(self) -> str:
        return f"{self.provider.value}: {self.message}"


# =============================================================================
# Report Records
# =============================================================================


class Goal(CamelModel):
    """A plan objective or target."""

    id: str = Field(..., min_length=1)
    title: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED
    target_date: str | None = None
    status: GoalStatus = GoalStatus.PLANNED
    priority: Priority = Priority.MEDIUM


class BMP(CamelModel):
    """A best management practice."""

    id: str = Field(..., min_length=1)
    name: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED
    category: str = "Other"
    implementation_cost: float | None = None
    maintenance_cost: float | None = None
    effectiveness: float | None = Field(default=None, ge=0, le=100)
    applicable_areas: list[str] = Field(default_factory=list)


class ImplementationActivity(CamelModel):
    """A concrete project or activity carrying out the plan."""

    id: str = Field(..., min_length=1)
    name: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED
    start_date: str | None = None
    end_date: str | None = None
    budget: float | None = None
    responsible: str = NOT_SPECIFIED
    status: ActivityStatus = ActivityStatus.PLANNED
    related_goals: list[str] = Field(default_factory=list)
    related_bmps: list[str] = Field(default_factory=list, alias="relatedBMPs")


class MonitoringMetric(CamelModel):
    """A monitored parameter or indicator."""

    id: str = Field(..., min_length=1)
    name: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED
    unit: str = NOT_SPECIFIED
    target_value: float | None = None
    current_value: float | None = None
    frequency: str = NOT_SPECIFIED
    methodology: str = NOT_SPECIFIED
    responsible_party: str = NOT_SPECIFIED


class OutreachActivity(CamelModel):
    """An education or stakeholder engagement activity."""

    id: str = Field(..., min_length=1)
    name: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED
    target_audience: str = NOT_SPECIFIED
    method: str = NOT_SPECIFIED
    timeline: str = "Ongoing"
    expected_outcome: str = NOT_SPECIFIED
    budget: float | None = None


class Coordinates(CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GeographicArea(CamelModel):
    """A watershed, county, region or state covered by the plan."""

    id: str = Field(..., min_length=1)
    name: str = NOT_SPECIFIED
    type: AreaType = AreaType.WATERSHED
    area: float | None = None
    coordinates: Coordinates | None = None
    characteristics: list[str] = Field(default_factory=list)


# =============================================================================
# Canonical Report
# =============================================================================


class ReportSummary(CamelModel):
    """Derived counts and scores for a report."""

    total_goals: int = Field(..., ge=0)
    total_bmps: int = Field(..., ge=0, alias="totalBMPs")
    completion_rate: float = Field(..., ge=0.0, le=100.0)
    extraction_accuracy: int = EXTRACTION_ACCURACY_PLACEHOLDER
    processing_time: int = Field(default=0, ge=0, description="Elapsed milliseconds")


class ReportMetadata(CamelModel):
    """Where a report came from and how it was produced."""

    file_name: str
    file_size: int = Field(..., ge=0)
    extracted_at: datetime
    processing_method: str = Field(
        ...,
        description="Provider label and model identifier, e.g. 'OpenAI gpt-4.1'",
    )


class ExtractedReport(CamelModel):
    """
    Structured report extracted from a watershed plan.

    Every record in every category carries a non-empty id that is unique
    within the report.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    summary: ReportSummary
    goals: list[Goal] = Field(default_factory=list)
    bmps: list[BMP] = Field(default_factory=list)
    implementation: list[ImplementationActivity] = Field(default_factory=list)
    monitoring: list[MonitoringMetric] = Field(default_factory=list)
    outreach: list[OutreachActivity] = Field(default_factory=list)
    geographic_areas: list[GeographicArea] = Field(default_factory=list)
    metadata: ReportMetadata


# JSON key of each category -> record model
REPORT_CATEGORIES: dict[str, type[CamelModel]] = {
    "goals": Goal,
    "bmps": BMP,
    "implementation": ImplementationActivity,
    "monitoring": MonitoringMetric,
    "outreach": OutreachActivity,
    "geographicAreas": GeographicArea,
}


def empty_report_payload() -> dict[str, list[Any]]:
    """Return a provider payload with every category present and empty."""
    return {category: [] for category in REPORT_CATEGORIES}


# =============================================================================
# API Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(default="1.0.0")
    timestamp: datetime | None = None
    services: dict[str, str] = Field(default_factory=dict)


class ExportRequest(BaseModel):
    """Request body for exporting a report."""

    data: ExtractedReport = Field(..., description="Report to export")
    format: ExportFormat = Field(..., description="Output format")

    @field_validator("format", mode="before")
    @classmethod
    def lowercase_format(cls, v: Any) -> Any:
        """Accept 'CSV', 'Excel' and friends."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ExportFormatInfo(BaseModel):
    format: ExportFormat
    name: str
    description: str
    extension: str
    mime_type: str = Field(..., serialization_alias="mimeType")


class ExportFormatsResponse(BaseModel):
    formats: list[ExportFormatInfo]
