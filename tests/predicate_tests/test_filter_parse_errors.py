# tests/predicate_tests/test_filter_parse_errors.py

import pytest

from predicate import ParseError, compile_query, parse


class TestFilterParseErrors:
    """Malformed filter expressions raise ParseError."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            "level >=",
            ">= warning",
            "label == a &",
            "(label == a",
            "label == a)",
            "label a",
            "label == a b",
            "level >= # ",
        ],
    )
    def test_syntax_errors(self, text):
        with pytest.raises(ParseError):
            parse(text)

    @pytest.mark.parametrize(
        "text",
        [
            "colour == red",
            "level >= loud",
            "status_code > many",
            "state == lost",
            "duration < true",
        ],
    )
    def test_unknown_fields_and_invalid_values(self, text):
        with pytest.raises(ParseError):
            parse(text)

    def test_null_only_compares_for_equality(self):
        parse("url == null")
        parse("url != null")
        with pytest.raises(ParseError):
            parse("url ~ null")
        with pytest.raises(ParseError):
            parse("duration > null")

    def test_error_message_names_position(self):
        with pytest.raises(ParseError) as excinfo:
            parse("label == a & & label == b")
        assert "position" in str(excinfo.value)

    def test_compile_query_propagates_errors(self):
        with pytest.raises(ParseError):
            compile_query("label ==")
