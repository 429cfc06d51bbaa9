"""
Validation and normalization of raw provider records.

Provider output is untyped JSON. Before anything reaches the report, every
record is checked against its category's schema here:

- Non-object items are dropped
- Missing ids are backfilled with a UUID; duplicate ids are replaced
- Numbers are parsed from strings ("$1,250,000", "75%") with price-parser
- Dates are normalized to YYYY-MM-DD when fully specified
- Enumerated values are normalized or defaulted
- Missing text becomes "Not specified"; list fields drop nulls
- Unknown keys are discarded
"""

import logging
import re
import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from dateutil import parser as date_parser
from price_parser import Price
from pydantic import ValidationError

# Handle both package imports and standalone imports
try:
    from ...models import (
        NOT_SPECIFIED,
        REPORT_CATEGORIES,
        ActivityStatus,
        AreaType,
        CamelModel,
        GoalStatus,
        Priority,
    )
except ImportError:
    from models import (
        NOT_SPECIFIED,
        REPORT_CATEGORIES,
        ActivityStatus,
        AreaType,
        CamelModel,
        GoalStatus,
        Priority,
    )

logger = logging.getLogger(__name__)

TEXT = "text"
NUMBER = "number"
PERCENT = "percent"
DATE = "date"
LIST = "list"
COORDINATES = "coordinates"

# Values models use to say "nothing here"
_EMPTY_MARKERS = {"", "null", "none", "n/a", "na", "not specified", "unknown", "tbd"}

_CHOICE_ALIASES = {
    "in progress": "in-progress",
    "in_progress": "in-progress",
    "inprogress": "in-progress",
    "underway": "in-progress",
    "complete": "completed",
    "done": "completed",
    "finished": "completed",
    "planning": "planned",
    "proposed": "planned",
    "active": "ongoing",
    "continuing": "ongoing",
}

# Per category: JSON field name -> kind, or (enum class, default) for choices
CATEGORY_FIELDS: dict[str, dict[str, Any]] = {
    "goals": {
        "title": TEXT,
        "description": TEXT,
        "targetDate": DATE,
        "status": (GoalStatus, GoalStatus.PLANNED),
        "priority": (Priority, Priority.MEDIUM),
    },
    "bmps": {
        "name": TEXT,
        "description": TEXT,
        "category": TEXT,
        "implementationCost": NUMBER,
        "maintenanceCost": NUMBER,
        "effectiveness": PERCENT,
        "applicableAreas": LIST,
    },
    "implementation": {
        "name": TEXT,
        "description": TEXT,
        "startDate": DATE,
        "endDate": DATE,
        "budget": NUMBER,
        "responsible": TEXT,
        "status": (ActivityStatus, ActivityStatus.PLANNED),
        "relatedGoals": LIST,
        "relatedBMPs": LIST,
    },
    "monitoring": {
        "name": TEXT,
        "description": TEXT,
        "unit": TEXT,
        "targetValue": NUMBER,
        "currentValue": NUMBER,
        "frequency": TEXT,
        "methodology": TEXT,
        "responsibleParty": TEXT,
    },
    "outreach": {
        "name": TEXT,
        "description": TEXT,
        "targetAudience": TEXT,
        "method": TEXT,
        "timeline": TEXT,
        "expectedOutcome": TEXT,
        "budget": NUMBER,
    },
    "geographicAreas": {
        "name": TEXT,
        "type": (AreaType, AreaType.WATERSHED),
        "area": NUMBER,
        "coordinates": COORDINATES,
        "characteristics": LIST,
    },
}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip().lower() in _EMPTY_MARKERS


def parse_number(value: Any) -> float | None:
    """
    Parse a numeric value that may arrive as a formatted string.

    Handles "$1,234.56", "1.234,56 EUR", "45%", plain numbers. Returns None
    for anything that is not a number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str) or _is_empty(value):
        return None

    value = value.strip()
    try:
        price = Price.fromstring(value)
        if price.amount_float is not None:
            return price.amount_float

        # price-parser finds no amount in values such as "75%"
        cleaned = re.sub(r"[^\d.,\-]", "", value)
        if not cleaned:
            return None
        if "," in cleaned and "." in cleaned:
            if cleaned.rfind(",") > cleaned.rfind("."):
                cleaned = cleaned.replace(".", "").replace(",", ".")
            else:
                cleaned = cleaned.replace(",", "")
        elif "," in cleaned:
            parts = cleaned.split(",")
            if len(parts) == 2 and len(parts[1]) == 2:
                cleaned = cleaned.replace(",", ".")
            else:
                cleaned = cleaned.replace(",", "")
        return float(cleaned)
    except (ValueError, AttributeError):
        return None


def parse_date(value: Any) -> str | None:
    """
    Parse a fully specified date to YYYY-MM-DD.

    Returns None for partial dates ("2025", "Spring 2026") or text that is
    not a date, so callers can keep the original wording.
    """
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None

    if re.match(r"^\d{4}-\d{2}-\d{2}$", value):
        return value

    try:
        # Parse against two different defaults: a fully specified date
        # resolves identically both times.
        first = date_parser.parse(value, default=datetime(2000, 1, 1))
        second = date_parser.parse(value, default=datetime(2001, 2, 2))
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return first.strftime("%Y-%m-%d")


def _normalize_text(value: Any) -> str:
    if value is None:
        return NOT_SPECIFIED
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or NOT_SPECIFIED


def _normalize_date(value: Any) -> str | None:
    if _is_empty(value):
        return None
    if not isinstance(value, str):
        value = str(value)
    return parse_date(value) or value.strip()


def _normalize_percent(value: Any) -> float | None:
    number = parse_number(value)
    if number is None:
        return None
    return min(max(number, 0.0), 100.0)


def _normalize_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        return [str(value)]
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _normalize_coordinates(value: Any) -> dict[str, float] | None:
    if not isinstance(value, dict):
        return None
    lat = parse_number(value.get("lat", value.get("latitude")))
    lng = parse_number(value.get("lng", value.get("lon", value.get("longitude"))))
    if lat is None or lng is None:
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return {"lat": lat, "lng": lng}


def _normalize_choice(value: Any, choices: type[Enum], default: Enum) -> str:
    if not isinstance(value, str):
        return default.value
    key = value.strip().lower()
    key = _CHOICE_ALIASES.get(key, key.replace(" ", "-").replace("_", "-"))
    allowed = {member.value for member in choices}
    if key in allowed:
        return key
    logger.debug("Unknown %s value %r, using %s", choices.__name__, value, default.value)
    return default.value


_NORMALIZERS = {
    TEXT: _normalize_text,
    NUMBER: parse_number,
    PERCENT: _normalize_percent,
    DATE: _normalize_date,
    LIST: _normalize_list,
    COORDINATES: _normalize_coordinates,
}


def _lookup(record: dict[str, Any], json_name: str) -> Any:
    """Read a field by its camelCase name, tolerating snake_case keys."""
    if json_name in record:
        return record[json_name]
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", json_name).lower()
    return record.get(snake)


def prepare_record(category: str, record: dict[str, Any]) -> dict[str, Any]:
    """Normalize one raw record's known fields, keyed by JSON field name."""
    prepared: dict[str, Any] = {}
    for json_name, kind in CATEGORY_FIELDS[category].items():
        value = _lookup(record, json_name)
        if isinstance(kind, tuple):
            choices, default = kind
            prepared[json_name] = _normalize_choice(value, choices, default)
        else:
            prepared[json_name] = _NORMALIZERS[kind](value)
    return prepared


def _record_id(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_records(
    category: str,
    items: Any,
    seen_ids: set[str],
) -> list[CamelModel]:
    """
    Validate a category's raw records into report models.

    Args:
        category: JSON category key (e.g. "goals").
        items: The raw value the provider returned for that key.
        seen_ids: Ids already used in this report; updated in place.

    Returns:
        Validated records in their original order.
    """
    model = REPORT_CATEGORIES[category]

    if items is None:
        return []
    if not isinstance(items, list):
        logger.warning("Expected a list for '%s', got %s", category, type(items).__name__)
        return []

    records: list[CamelModel] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Dropping non-object %s[%d]: %r", category, index, item)
            continue

        record_id = _record_id(item.get("id"))
        if record_id is None:
            record_id = str(uuid.uuid4())
        elif record_id in seen_ids:
            replacement = str(uuid.uuid4())
            logger.warning(
                "Duplicate id '%s' in %s, replaced with %s", record_id, category, replacement
            )
            record_id = replacement

        prepared = prepare_record(category, item)
        prepared["id"] = record_id

        try:
            records.append(model.model_validate(prepared))
        except ValidationError as e:
            logger.warning("Dropping invalid %s[%d]: %s", category, index, e)
            continue
        seen_ids.add(record_id)

    return records
