"""
Template substitution tests

Tests variable extraction, value escaping, default resolution, preview and
usage analysis.
"""

from datetime import date

import pytest

from mdtypst.lib.substitution import (
    ESCAPE_TABLE,
    defaults_get,
    substitution_preview,
    template_analyze,
    value_escape,
    variables_extract,
    variables_substitute,
)


SPECIALS = [char for char, _ in ESCAPE_TABLE if char != "\\"]


class TestExtraction:
    """Test $name$ discovery"""

    def test_first_seen_order(self):
        assert variables_extract("$title$ by $author$: $title$") == ["title", "author"]

    def test_none(self):
        assert variables_extract("no placeholders, $ alone $") == []

    def test_word_characters_only(self):
        assert variables_extract("$font-size$ $font_size$") == ["font_size"]


class TestEscaping:
    """Test value escaping"""

    def test_markup_characters(self):
        assert value_escape('A "quoted" #value') == 'A \\"quoted\\" \\#value'

    def test_backslash_first(self):
        """An existing backslash is doubled, not re-escaped with its neighbour"""
        assert value_escape("a\\#b") == "a\\\\\\#b"

    def test_all_specials(self):
        assert value_escape("$[]{}<>") == "\\$\\[\\]\\{\\}\\<\\>"

    def test_empty(self):
        assert value_escape("") == ""
        assert value_escape(None) == ""

    @pytest.mark.parametrize("value", [
        "plain",
        "Costs $5 #tag",
        'He said "go" [now]',
        "{a} <b>",
        "$title$",
    ])
    def test_no_unescaped_specials(self, value):
        """Every special character in the output is preceded by a backslash"""
        escaped = value_escape(value)
        for index, char in enumerate(escaped):
            if char in SPECIALS:
                assert escaped[index - 1] == "\\"


class TestSubstitute:
    """Test rendering with context and defaults"""

    def test_every_occurrence(self):
        out = variables_substitute("$title$ - $title$", {"title": "A#B"})
        assert out == "A\\#B - A\\#B"

    def test_missing_body_empty(self):
        assert variables_substitute("[$body$]", {}) == "[]"

    def test_defaults(self):
        out = variables_substitute("$font$|$fontSize$|$pageSize$|$margins$", {})
        assert out == "Liberation Serif|12pt|a4|2.5cm"

    def test_date_default_is_today(self):
        assert variables_substitute("$date$", {}) == date.today().isoformat()

    def test_empty_value_uses_default(self):
        assert variables_substitute("$font$", {"font": ""}) == "Liberation Serif"
        assert variables_substitute("$font$", {"font": None}) == "Liberation Serif"

    def test_unknown_missing_empty(self):
        assert variables_substitute("<$custom$>", {}) == "<>"

    def test_value_not_rescanned(self):
        """A value that looks like a placeholder is escaped, not expanded"""
        out = variables_substitute("$title$ $body$", {"title": "$body$", "body": "x"})
        assert out == "\\$body\\$ x"

    def test_defaults_fresh(self):
        defaults = defaults_get()
        defaults["font"] = "changed"
        assert defaults_get()["font"] == "Liberation Serif"


class TestPreviewAndAnalysis:
    """Test preview and analysis helpers"""

    def test_preview_reports_raw_values(self):
        text, substitutions = substitution_preview("$title$ $body$", {"title": "A#B"})

        assert text == "A\\#B "
        assert substitutions == [("title", "A#B"), ("body", "")]

    def test_analyze(self):
        analysis = template_analyze("$body$ $title$ $title$ $author$")

        assert analysis["total_variables"] == 4
        assert analysis["unique_variables"] == ["body", "title", "author"]
        assert analysis["required_variables"] == ["body"]
        assert analysis["optional_variables"] == ["title", "author"]
        assert analysis["variable_frequency"] == {"body": 1, "title": 2, "author": 1}

    def test_analyze_without_body(self):
        assert template_analyze("static")["required_variables"] == []
