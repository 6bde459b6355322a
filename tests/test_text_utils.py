"""Unit tests for free-text helpers."""

import pytest

from recruit_match.utils.text import (
    clean_optional_text,
    contains_either_way,
    normalize_text,
    parse_text_list,
)


class TestNormalizeText:
    def test_lowercases_and_collapses_whitespace(self):
        assert normalize_text("  Primary \t  School\n") == "primary school"

    @pytest.mark.parametrize("value", [None, 5, ["Primary"], b"Primary"])
    def test_non_string_is_empty(self, value):
        assert normalize_text(value) == ""


class TestCleanOptionalText:
    def test_strips(self):
        assert clean_optional_text("  English ") == "English"

    def test_blank_is_none(self):
        assert clean_optional_text("   ") is None

    def test_numbers_become_text(self):
        assert clean_optional_text(5) == "5"
        assert clean_optional_text(2.5) == "2.5"

    @pytest.mark.parametrize("value", [None, True, ["a"], {"a": 1}])
    def test_unusable_types(self, value):
        assert clean_optional_text(value) is None


class TestParseTextList:
    """Tests for lenient list parsing."""

    def test_native_list(self):
        assert parse_text_list([" Shanghai ", "Beijing", ""]) == ["Shanghai", "Beijing"]

    def test_native_list_drops_non_strings(self):
        assert parse_text_list(["Shanghai", 3, None]) == ["Shanghai"]

    def test_json_array_text(self):
        assert parse_text_list('["English", "Math"]') == ["English", "Math"]

    def test_comma_separated_text(self):
        assert parse_text_list("Shanghai, Beijing ,Suzhou") == ["Shanghai", "Beijing", "Suzhou"]

    def test_single_value(self):
        assert parse_text_list("Primary") == ["Primary"]

    def test_json_string_is_single_value(self):
        assert parse_text_list('"Shanghai"') == ["Shanghai"]
        assert parse_text_list('"  "') == []

    def test_duplicates_removed_in_order(self):
        assert parse_text_list("Math, English, Math") == ["Math", "English"]

    @pytest.mark.parametrize("value", [None, "", "   ", "[]", '{"a": 1}', "42", 42, object()])
    def test_empty_or_unusable(self, value):
        assert parse_text_list(value) == []

    def test_set_input(self):
        assert parse_text_list(frozenset({"Primary"})) == ["Primary"]


class TestContainsEitherWay:
    def test_either_direction(self):
        assert contains_either_way("primary", "primary school")
        assert contains_either_way("primary school", "primary")

    def test_unrelated(self):
        assert not contains_either_way("primary", "high school")

    def test_empty_never_matches(self):
        assert not contains_either_way("", "primary")
        assert not contains_either_way("primary", "")
