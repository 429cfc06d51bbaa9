"""Pytest configuration and fixtures."""

import io
from collections.abc import Sequence
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from pypdf import PdfWriter

from app.backend.config import Settings
from app.backend.main import app
from app.backend.models import ExtractionOptions, Provider
from app.backend.services.ai import ExtractionService, get_extraction_service
from app.backend.services.ai.providers import LLMProvider


def build_pdf(page_texts: Sequence[str]) -> bytes:
    """
    Build a small text PDF, one page per entry, lines split on newlines.

    Offsets in the xref table are computed so the file is fully valid.
    """
    count = len(page_texts)
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(count))
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {count} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for index, text in enumerate(page_texts):
        ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
        for line in text.split("\n"):
            escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
            ops.append(f"({escaped}) Tj T*")
        ops.append("ET")
        stream = "\n".join(ops).encode("latin-1")
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * index} 0 R >>"
            ).encode()
        )
        objects.append(
            b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(out)


class FakeProvider(LLMProvider):
    """Provider that replays scripted outcomes instead of calling an API."""

    def __init__(
        self,
        name: Provider,
        outcomes: Sequence[dict[str, Any] | Exception] = (),
        model: str = "test-model",
    ):
        super().__init__(model)
        self.name = name
        self.label = "OpenAI" if name == Provider.OPENAI else "Anthropic"
        self.outcomes = list(outcomes)
        self.prompts: list[str] = []
        self.options: list[ExtractionOptions] = []

    async def _call(self, prompt: str, options: ExtractionOptions) -> dict[str, Any]:
        self.prompts.append(prompt)
        self.options.append(options)
        outcome = self.outcomes.pop(0) if self.outcomes else {}
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """A provider response with one record in most categories."""
    return {
        "goals": [
            {
                "id": "goal_reduce_phosphorus",
                "title": "Reduce phosphorus loading",
                "description": "Cut total phosphorus by 40% at the outlet",
                "targetDate": "2030-12-31",
                "status": "planned",
                "priority": "high",
            },
            {
                "id": "goal_restore_habitat",
                "title": "Restore riparian habitat",
                "description": "Replant 12 miles of stream corridor",
                "targetDate": None,
                "status": "completed",
                "priority": "medium",
            },
        ],
        "bmps": [
            {
                "id": "bmp_riparian_buffers",
                "name": "Riparian buffers",
                "description": "35 ft forested buffers",
                "category": "Agricultural",
                "implementationCost": "$250,000",
                "maintenanceCost": None,
                "effectiveness": 60,
                "applicableAreas": ["Upper Creek", None],
            }
        ],
        "implementation": [
            {
                "id": "impl_streambank_project",
                "name": "Streambank stabilization",
                "description": "Stabilize 2,000 ft of eroding bank",
                "startDate": "2025-04-01",
                "endDate": "2026-10-31",
                "budget": 480000,
                "responsible": "County SWCD",
                "status": "ongoing",
                "relatedGoals": ["goal_reduce_phosphorus"],
                "relatedBMPs": ["bmp_riparian_buffers"],
            }
        ],
        "monitoring": [],
        "outreach": [
            {
                "id": "outreach_field_days",
                "name": "Farmer field days",
                "description": "Annual demonstrations of cover crops",
                "targetAudience": "Producers",
                "method": "Workshops",
                "timeline": "Annually",
                "expectedOutcome": "Adoption on 5,000 acres",
                "budget": None,
            }
        ],
        "geographicAreas": [
            {
                "id": "area_upper_creek",
                "name": "Upper Creek",
                "type": "watershed",
                "area": 125.5,
                "coordinates": {"lat": 41.2, "lng": -93.6},
                "characteristics": ["Row crops", "Karst"],
            }
        ],
    }


@pytest.fixture
def watershed_text() -> str:
    """Raw text as a PDF library might return it for a two page plan."""
    return (
        "Big Creek Water-\nshed Plan\n\n"
        "The plan targets non-\npoint source pollution across the basin.\n"
        "Nutrient reduc-\ntion goals are set for 2030.\n\n"
        "Implementation\nStreambank stabilization will begin in 2025.\n"
        "Monitoring of phosphorus occurs quarterly at four sites."
    )


@pytest.fixture
def text_pdf_bytes() -> bytes:
    """Two page PDF with a text layer."""
    return build_pdf(
        [
            "Big Creek Watershed Plan\nGoal: reduce phosphorus loading by 40 percent.",
            "Implementation\nStreambank stabilization begins in 2025.",
        ]
    )


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    """Single page PDF with no text."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def encrypted_pdf_bytes() -> bytes:
    """Password-protected PDF."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    writer.encrypt("secret")
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"


@pytest.fixture
def settings() -> Settings:
    """Settings with both providers configured and no .env file."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        anthropic_api_key="sk-ant-test",
    )


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def override_extraction_service():
    """Install an ExtractionService built from the given providers."""

    def install(*providers: LLMProvider) -> ExtractionService:
        service = ExtractionService(providers=list(providers))
        app.dependency_overrides[get_extraction_service] = lambda: service
        return service

    yield install
    app.dependency_overrides.pop(get_extraction_service, None)
