"""Tests for PDF text cleanup and page reconstruction."""

import random

import pytest

from app.backend.services.text_normalizer import (
    EmptyDocumentError,
    clean_text,
    combine_with_page_markers,
    normalize_document,
    page_marker,
    split_pages,
    strip_headers_footers,
)


class TestCleanText:
    """Tests for clean_text."""

    def test_rejoins_hyphenated_line_breaks(self):
        """Words hyphenated across lines are joined."""
        assert clean_text("nutri-\nent loading") == "nutrient loading"
        assert clean_text("sedi-  \n  ment") == "sediment"

    def test_rejoins_split_compounds(self):
        """Domain compounds split across lines are rejoined, keeping case."""
        assert clean_text("Big Creek Water\nshed") == "Big Creek Watershed"
        assert clean_text("water-\nshed plan") == "watershed plan"
        assert clean_text("Non\npoint sources") == "Nonpoint sources"

    def test_collapses_horizontal_whitespace(self):
        """Runs of spaces and tabs become one space, newlines survive."""
        assert clean_text("phosphorus \t  load\nnitrogen") == "phosphorus load\nnitrogen"

    def test_caps_consecutive_newlines(self):
        """At most three newlines in a row are kept."""
        assert clean_text("a\n\n\n\n\n\nb") == "a\n\n\nb"

    def test_blank_lines_with_spaces_count_toward_cap(self):
        """Lines holding only spaces are treated as empty lines."""
        assert clean_text("a\n \n \n \n \nb") == "a\n\n\nb"
        assert clean_text("nitrogen  \nload") == "nitrogen\nload"

    def test_normalizes_carriage_returns_and_form_feeds(self):
        """CRLF, CR and form feeds become line breaks."""
        assert clean_text("a\r\nb\rc\fd") == "a\nb\nc\nd"

    def test_strips_outer_whitespace(self):
        assert clean_text("  \n text \n ") == "text"


class TestSplitPages:
    """Tests for split_pages."""

    def test_single_page_returns_whole_text(self):
        assert split_pages("some text", 1) == ["some text"]
        assert split_pages("some text", 0) == ["some text"]

    def test_returns_exactly_page_count_segments(self):
        """The number of segments always equals the declared page count."""
        text = "\n\n".join(f"Paragraph {i} " + "x" * 50 for i in range(10))
        for count in (2, 3, 5, 7):
            assert len(split_pages(text, count)) == count

    def test_segments_non_empty_for_varied_text(self):
        """Paragraph and line breaks of varying size never leave a page empty."""
        rng = random.Random(20240611)
        words = ["runoff", "sediment", "nutrient", "riparian", "buffer", "E.", "coli", "a"]
        breaks = [" ", " ", " ", "\n", "\n\n", "\n\n\n"]
        for _ in range(300):
            page_count = rng.randint(2, 9)
            pieces = []
            for _ in range(rng.randint(page_count * 3, 120)):
                pieces.append(rng.choice(words))
                pieces.append(rng.choice(breaks))
            text = "".join(pieces).strip()
            text += "x" * (-len(text) % page_count)

            segments = split_pages(text, page_count)

            assert len(segments) == page_count
            assert all(segments), (page_count, segments)
            assert "".join(segments).replace("\n", "").replace(" ", "") == (
                text.replace("\n", "").replace(" ", "")
            )

    def test_text_shorter_than_page_count_pads_with_empty_segments(self):
        """Documents with fewer characters than pages still produce one segment per page."""
        segments = split_pages("ab", 4)
        assert len(segments) == 4
        assert "".join(segments) == "ab"

    def test_prefers_paragraph_breaks(self):
        """Boundaries move to a nearby blank line instead of splitting mid-line."""
        first = "a" * 40
        second = "b" * 40
        segments = split_pages(f"{first}\n\n{second}", 2)
        assert segments == [first, second]

    def test_no_text_lost(self):
        """Every non-whitespace character survives the split."""
        text = "\n".join(f"line {i} of the plan" for i in range(30))
        segments = split_pages(text, 4)
        assert "".join(segments).replace("\n", "") == text.replace("\n", "")


class TestStripHeadersFooters:
    """Tests for strip_headers_footers."""

    def test_removes_running_headers_and_page_numbers(self):
        page = "\n".join(
            [
                "Watershed Plan",
                "Draft",
                "Body line one",
                "Body line two",
                "Body line three",
                "Body line four",
                "Page 3 of 40",
            ]
        )
        result = strip_headers_footers(page)
        assert "Watershed Plan" not in result
        assert "Draft" not in result
        assert "Page 3 of 40" not in result
        assert "Body line one" in result and "Body line four" in result

    def test_keeps_matching_lines_in_body(self):
        """A bare number in the middle of a page is content, not a footer."""
        page = "\n".join(["intro", "a", "b", "c", "42", "d", "e", "f", "outro"])
        assert "\n42\n" in strip_headers_footers(page)

    def test_short_pages_untouched(self):
        """Pages with fewer than five lines are returned as is."""
        page = "Page 1\nDraft\nContent"
        assert strip_headers_footers(page) == page


class TestNormalizeDocument:
    """Tests for normalize_document."""

    def test_page_texts_match_page_count(self, watershed_text: str):
        normalized = normalize_document(watershed_text, 2)
        assert len(normalized.page_texts) == 2

    def test_zero_page_count_yields_one_page(self, watershed_text: str):
        normalized = normalize_document(watershed_text, 0)
        assert len(normalized.page_texts) == 1

    def test_combined_text_has_markers_in_order(self, watershed_text: str):
        normalized = normalize_document(watershed_text, 3)
        positions = [normalized.combined_text.index(page_marker(n)) for n in (1, 2, 3)]
        assert positions == sorted(positions)
        assert normalized.combined_text.startswith("=== PAGE 1 ===\n")

    def test_cleanup_applied(self, watershed_text: str):
        normalized = normalize_document(watershed_text, 1)
        assert "Watershed Plan" in normalized.combined_text
        assert "nonpoint" in normalized.combined_text
        assert "reduction" in normalized.combined_text

    @pytest.mark.parametrize("raw", ["", "   ", "\n\n\t\f"])
    def test_empty_text_raises(self, raw: str):
        with pytest.raises(EmptyDocumentError):
            normalize_document(raw, 1)

    def test_result_is_frozen(self, watershed_text: str):
        normalized = normalize_document(watershed_text, 1)
        with pytest.raises(Exception):
            normalized.combined_text = "changed"


def test_combine_with_page_markers():
    assert combine_with_page_markers(["one", "two"]) == (
        "=== PAGE 1 ===\none\n\n=== PAGE 2 ===\ntwo"
    )
