"""Tests for JSON recovery of model output."""

from app.backend.models import REPORT_CATEGORIES
from app.backend.services.ai.repair import (
    close_truncated_json,
    extract_json_region,
    parse_json_with_repair,
)


class TestCloseTruncatedJson:
    """Tests for close_truncated_json."""

    def test_appends_brackets_then_braces(self):
        assert close_truncated_json('{"goals": [{"id": "g1"}') == '{"goals": [{"id": "g1"}]}'

    def test_balanced_input_unchanged(self):
        assert close_truncated_json('{"a": [1]}') == '{"a": [1]}'


class TestParseJsonWithRepair:
    """Tests for parse_json_with_repair."""

    def test_valid_json_parsed(self):
        assert parse_json_with_repair('{"goals": []}') == {"goals": []}

    def test_truncated_json_repaired(self):
        """Output cut off mid-array is closed and parsed."""
        content = '{"goals": [{"id": "g1", "title": "Reduce sediment"}'
        result = parse_json_with_repair(content)
        assert result == {"goals": [{"id": "g1", "title": "Reduce sediment"}]}

    def test_missing_closing_brace(self):
        assert parse_json_with_repair('{"goals": [{"id":"g1"}]') == {"goals": [{"id": "g1"}]}

    def test_unrepairable_returns_empty_skeleton(self):
        """Garbage never raises; every category comes back empty."""
        result = parse_json_with_repair('{"goals": [{"id": "g1", "title": "Red')
        assert result == {category: [] for category in REPORT_CATEGORIES}

    def test_non_object_returns_empty_skeleton(self):
        result = parse_json_with_repair("[1, 2, 3]")
        assert set(result) == set(REPORT_CATEGORIES)


class TestExtractJsonRegion:
    """Tests for extract_json_region."""

    def test_extracts_object_from_prose(self):
        text = 'Here is the data:\n{"goals": [{"id": "g1"}]}\nLet me know!'
        assert extract_json_region(text) == {"goals": [{"id": "g1"}]}

    def test_greedy_first_to_last_brace(self):
        """The region spans the first '{' to the last '}'."""
        text = 'prefix {"a": {"b": 1}} suffix'
        assert extract_json_region(text) == {"a": {"b": 1}}

    def test_no_braces_returns_none(self):
        assert extract_json_region("I could not find any goals.") is None

    def test_invalid_region_returns_none(self):
        """Two separate objects make the greedy region unparseable."""
        assert extract_json_region('{"a": 1} and {"b": 2}') is None
