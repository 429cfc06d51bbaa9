"""
Text cleanup and page reconstruction for extracted PDF text.

PDF text extraction returns one long string with hyphenation artifacts,
ragged whitespace and running headers/footers. This module cleans that text,
splits it back into the declared number of pages, strips headers/footers near
page boundaries and prefixes every page with a ``=== PAGE <n> ===`` marker so
the LLM can reference locations in the document.
"""

import bisect
import logging
import re

# Handle both package imports and standalone imports
try:
    from ..models import NormalizedText
except ImportError:
    from models import NormalizedText

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_NEWLINES = 3
HEADER_FOOTER_WINDOW = 3  # lines checked at the top and bottom of each page
MIN_LINES_FOR_HEADER_STRIP = 5

# Boundary search windows, as a fraction of the target page length
PARAGRAPH_BREAK_WINDOW = 0.4
LINE_BREAK_WINDOW = 0.3

_HYPHENATED_BREAK = re.compile(r"(\w+)-[ \t]*\n+[ \t]*(\w+)")
# Domain compounds that PDF layout often splits with or without a hyphen
_SPLIT_COMPOUNDS = [
    re.compile(r"\b(water)-?[ \t]*\n+[ \t]*(shed)", re.IGNORECASE),
    re.compile(r"\b(non)-?[ \t]*\n+[ \t]*(point)", re.IGNORECASE),
]
_HORIZONTAL_WS = re.compile(r"[ \t\v]+")
_TRAILING_WS = re.compile(r"[ \t]+\n")
_EXCESS_NEWLINES = re.compile(r"\n{%d,}" % (MAX_CONSECUTIVE_NEWLINES + 1))

HEADER_FOOTER_PATTERNS = [
    re.compile(r"^\s*page\s+\d+(\s+of\s+\d+)?\s*$", re.IGNORECASE),
    re.compile(r"^\s*\d+\s*$"),  # bare page numbers and years
    re.compile(r"^\s*draft\s*$", re.IGNORECASE),
    re.compile(r"^\s*final\s*$", re.IGNORECASE),
    re.compile(r"^\s*watershed\s+(plan|management|strategy)\s*$", re.IGNORECASE),
    re.compile(r"^\s*chapter\s+\d+\s*$", re.IGNORECASE),
    re.compile(r"^\s*section\s+\d+\s*$", re.IGNORECASE),
]


class EmptyDocumentError(Exception):
    """Raised when a document has no text left after cleanup."""

    pass


def page_marker(page_number: int) -> str:
    """Return the location marker for a 1-indexed page."""
    return f"=== PAGE {page_number} ==="


def clean_text(raw_text: str) -> str:
    """
    Clean raw PDF text while keeping its line structure.

    - Normalizes carriage returns and turns form feeds into line breaks
    - Joins words hyphenated across line breaks ("nutri-\\nent" -> "nutrient")
    - Reassembles "water"/"shed" and "non"/"point" split across lines
    - Collapses runs of spaces/tabs and drops trailing spaces on each line
    - Caps consecutive newlines at 3
    """
    text = raw_text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")

    for pattern in _SPLIT_COMPOUNDS:
        text = pattern.sub(lambda m: m.group(1) + m.group(2), text)
    text = _HYPHENATED_BREAK.sub(r"\1\2", text)

    text = _HORIZONTAL_WS.sub(" ", text)
    text = _TRAILING_WS.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n" * MAX_CONSECUTIVE_NEWLINES, text)
    return text.strip()


def _find_boundary(text: str, start: int, estimate: int, target_length: int) -> int:
    """
    Move an estimated page boundary to a nearby paragraph or line break.

    Preference order: next paragraph break, previous paragraph break, next
    line break, previous line break, then the raw estimate. A boundary never
    lands at or before ``start``.
    """
    paragraph_window = target_length * PARAGRAPH_BREAK_WINDOW
    line_window = target_length * LINE_BREAK_WINDOW

    candidates = [
        (text.find("\n\n", estimate), paragraph_window, True),
        (text.rfind("\n\n", start + 1, estimate + 2), paragraph_window, False),
        (text.find("\n", estimate), line_window, True),
        (text.rfind("\n", start + 1, estimate + 1), line_window, False),
    ]
    for position, window, forward in candidates:
        if position == -1 or position <= start:
            continue
        distance = position - estimate if forward else estimate - position
        if 0 <= distance < window:
            return position
    return estimate


def split_pages(text: str, page_count: int) -> list[str]:
    """
    Split cleaned text into ``page_count`` segments of roughly equal length.

    Boundary ``i`` is estimated at ``i * len(text) // page_count`` and nudged
    to the nearest paragraph or line break. When the text has at least one
    non-whitespace character per page, each boundary is also capped so that
    every page, including the remaining ones, keeps some text. The result
    always has exactly ``page_count`` entries (some may be empty only when
    the document is shorter than its page count).
    """
    if page_count <= 1:
        return [text]

    target_length = len(text) // page_count
    # Offsets of every non-whitespace character, used to keep pages non-empty
    visible = [i for i, char in enumerate(text) if not char.isspace()]
    can_fill_all = len(visible) >= page_count

    segments: list[str] = []
    start = 0

    for index in range(page_count):
        if index == page_count - 1:
            end = len(text)
        else:
            estimate = (index + 1) * len(text) // page_count
            end = max(_find_boundary(text, start, estimate, target_length), start)
            if can_fill_all:
                pages_left = page_count - index - 1
                first_visible = visible[bisect.bisect_left(visible, start)]
                latest_end = visible[len(visible) - pages_left]
                end = max(first_visible + 1, min(end, latest_end))
        segments.append(text[start:end].strip())
        start = end

    return segments


def strip_headers_footers(page_text: str) -> str:
    """
    Drop running header/footer lines from the top and bottom of a page.

    Only the first and last few lines are inspected so that a bare number
    or "Section 3" line in the middle of the body is kept.
    """
    lines = page_text.split("\n")
    if len(lines) < MIN_LINES_FOR_HEADER_STRIP:
        return page_text

    last_window_start = len(lines) - HEADER_FOOTER_WINDOW
    kept = []
    for index, line in enumerate(lines):
        near_edge = index < HEADER_FOOTER_WINDOW or index >= last_window_start
        if near_edge and line.strip() and any(
            pattern.match(line) for pattern in HEADER_FOOTER_PATTERNS
        ):
            continue
        kept.append(line)

    cleaned = "\n".join(kept)
    return _EXCESS_NEWLINES.sub("\n" * MAX_CONSECUTIVE_NEWLINES, cleaned).strip()


def combine_with_page_markers(page_texts: list[str] | tuple[str, ...]) -> str:
    """Join page segments, each prefixed with its page marker."""
    return "\n\n".join(
        f"{page_marker(number)}\n{text}"
        for number, text in enumerate(page_texts, start=1)
    )


def normalize_document(raw_text: str, page_count: int) -> NormalizedText:
    """
    Clean extracted PDF text and rebuild per-page segments with markers.

    Args:
        raw_text: Text returned by the PDF extraction library.
        page_count: Number of pages reported for the document.

    Returns:
        NormalizedText with one entry per page (at least one).

    Raises:
        EmptyDocumentError: If nothing but whitespace survives cleanup.
    """
    cleaned = clean_text(raw_text or "")
    if not cleaned:
        raise EmptyDocumentError(
            "PDF appears to be empty or contains no extractable text"
        )

    logger.info(
        "Cleaned text: %d -> %d characters, %d declared page(s)",
        len(raw_text),
        len(cleaned),
        page_count,
    )

    page_texts = tuple(
        strip_headers_footers(segment) for segment in split_pages(cleaned, page_count)
    )
    return NormalizedText(
        combined_text=combine_with_page_markers(page_texts),
        page_texts=page_texts,
    )
