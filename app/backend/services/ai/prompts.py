"""
Prompt construction for watershed plan extraction.

The prompt is a pure function of the document text: no timestamps, no
randomness, so identical inputs always produce byte-identical prompts.
"""

from collections.abc import Sequence

MAX_DOCUMENT_CHARS = 16_000
TRUNCATION_MARKER = "...[truncated]"


# =============================================================================
# System Prompt (JSON-mode providers)
# =============================================================================

EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert at extracting structured data from agricultural and "
    "environmental reports. Always respond with valid, complete JSON that matches "
    "the exact schema provided. Ensure your JSON response is properly terminated "
    "with closing braces and brackets."
)


# =============================================================================
# Prompt Sections
# =============================================================================

CATEGORY_INSTRUCTIONS = """EXTRACT ALL relevant items in these categories:

1. **GOALS**: Objectives, targets, purposes (reduce pollution, improve habitat, protect resources)
2. **BMPs**: Management practices (riparian buffers, conservation tillage, wetlands, bank stabilization)
3. **IMPLEMENTATION**: Specific projects/activities with budgets, timelines, responsible parties
4. **MONITORING**: Water quality parameters, biological indicators, assessments
5. **OUTREACH**: Education, training, workshops, stakeholder engagement
6. **GEOGRAPHIC AREAS**: Watersheds, counties, regions, water bodies"""

RESPONSE_SCHEMA = """Return valid JSON with this structure:
{
  "goals": [{"id": "goal_[name]", "title": "title", "description": "desc", "targetDate": "YYYY-MM-DD or null", "status": "planned|in-progress|completed", "priority": "low|medium|high"}],
  "bmps": [{"id": "bmp_[name]", "name": "name", "description": "desc", "category": "Water Quality|Agricultural|Stormwater|Stream Restoration|Other", "implementationCost": number_or_null, "maintenanceCost": number_or_null, "effectiveness": number_0_to_100_or_null, "applicableAreas": ["areas"]}],
  "implementation": [{"id": "impl_[name]", "name": "name", "description": "desc", "startDate": "YYYY-MM-DD or null", "endDate": "YYYY-MM-DD or null", "budget": number_or_null, "responsible": "party or Not specified", "status": "planned|ongoing|completed", "relatedGoals": ["goal_ids"], "relatedBMPs": ["bmp_ids"]}],
  "monitoring": [{"id": "monitor_[name]", "name": "name", "description": "desc", "unit": "unit or Not specified", "targetValue": number_or_null, "currentValue": number_or_null, "frequency": "freq or Not specified", "methodology": "method or Not specified", "responsibleParty": "party or Not specified"}],
  "outreach": [{"id": "outreach_[name]", "name": "name", "description": "desc", "targetAudience": "audience", "method": "method", "timeline": "timeline or Ongoing", "expectedOutcome": "outcome", "budget": number_or_null}],
  "geographicAreas": [{"id": "area_[name]", "name": "name", "type": "watershed|county|region|state", "area": number_or_null, "coordinates": {"lat": number, "lng": number} or null, "characteristics": ["features"]}]
}"""

EXTRACTION_RULES = """## IMPORTANT RULES:
- **BE COMPREHENSIVE**: don't return empty arrays unless truly no content exists
- Include all projects/activities you find, even with limited details
- Generate descriptive IDs (goal_reduce_phosphorus, bmp_riparian_buffers, impl_streambank_project)
- Use "Not specified" for missing required text fields, null for missing numbers
- Link related items via IDs when connections are clear
- Extract from the entire document, using page markers for context

**CRITICAL:** Watershed plans are detailed documents. If returning mostly empty arrays, you're being too selective. Look thoroughly for implementation activities, monitoring programs, and outreach efforts - they are standard components."""


def _processing_banner(page_count: int) -> str:
    """Describe the preprocessing applied to the document text."""
    return f"""## DOCUMENT PROCESSING ENHANCEMENTS:
- {page_count} pages processed individually
- Page markers (=== PAGE N ===) added for location tracking
- Line breaks preserved, hyphenated terms fixed
- Headers/footers stripped

"""


def truncate_document_text(text: str, limit: int = MAX_DOCUMENT_CHARS) -> str:
    """Cut text to ``limit`` characters, flagging the cut for the model."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]} {TRUNCATION_MARKER}"


def build_extraction_prompt(
    combined_text: str,
    page_texts: Sequence[str] | None = None,
) -> str:
    """
    Build the extraction prompt for a normalized document.

    Args:
        combined_text: Marker-prefixed document text.
        page_texts: Per-page segments; adds the preprocessing banner when given.

    Returns:
        The full prompt string.
    """
    banner = _processing_banner(len(page_texts)) if page_texts else ""

    return f"""{banner}Extract comprehensive data from this watershed plan. Be thorough - watershed plans contain extensive implementation, monitoring, and outreach programs.

{CATEGORY_INSTRUCTIONS}

{RESPONSE_SCHEMA}

{EXTRACTION_RULES}

Document text:
{truncate_document_text(combined_text)}
"""
