"""
JSON recovery for raw model output.

Two strategies, one per provider family:
- JSON-mode responses that were cut off are closed by appending the missing
  brackets/braces, falling back to an empty report skeleton.
- Free-form responses have their first-to-last brace region pulled out and
  parsed; failure there is reported, not repaired.
"""

import json
import logging
import re
from typing import Any

# Handle both package imports and standalone imports
try:
    from ...models import empty_report_payload
except ImportError:
    from models import empty_report_payload

logger = logging.getLogger(__name__)

# Greedy: first "{" through last "}"
_JSON_REGION = re.compile(r"\{[\s\S]*\}")


def close_truncated_json(content: str) -> str:
    """
    Append the closing brackets and braces a truncated JSON document lacks.

    Counts unmatched ``[`` and ``{`` characters in the raw text and appends
    the missing ``]`` first, then the missing ``}``.
    """
    missing_brackets = content.count("[") - content.count("]")
    missing_braces = content.count("{") - content.count("}")
    return content + "]" * max(missing_brackets, 0) + "}" * max(missing_braces, 0)


def parse_json_with_repair(content: str) -> dict[str, Any]:
    """
    Parse a JSON-mode response, repairing or replacing it if malformed.

    Never raises for bad content: when neither the raw text nor the repaired
    text parses to an object, an empty six-category skeleton is returned.

    Args:
        content: Raw response text from the model.

    Returns:
        Parsed JSON object.
    """
    try:
        parsed = json.loads(content)
        if isinstance(parsed, dict):
            return parsed
        logger.warning("Model returned JSON %s instead of an object", type(parsed).__name__)
    except json.JSONDecodeError as e:
        logger.warning("JSON parsing failed (%s), attempting structural repair", e)

        repaired = close_truncated_json(content)
        try:
            parsed = json.loads(repaired)
            if isinstance(parsed, dict):
                logger.info(
                    "Repaired truncated JSON (%d -> %d characters)",
                    len(content),
                    len(repaired),
                )
                return parsed
        except json.JSONDecodeError as second_error:
            logger.error("Repaired JSON still invalid: %s", second_error)

    logger.warning("Falling back to empty report structure")
    return empty_report_payload()


def extract_json_region(text: str) -> dict[str, Any] | None:
    """
    Pull the brace-delimited JSON object out of free-form model text.

    Returns None when there is no brace region or it does not parse to an
    object. No repair is attempted.
    """
    match = _JSON_REGION.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("JSON region in response did not parse: %s", e)
        return None
    return parsed if isinstance(parsed, dict) else None
