"""
Template validator tests

Tests the individual checks (brackets, strings, functions, variable names,
structure, context, features, page setup) and the aggregate result.
"""

import pytest

from mdtypst.lib.validator import TemplateValidator, quick_validate, summary_format
from mdtypst.models import TemplateValidationResult


# A template that passes every check without warnings
CLEAN = """#set page(paper: "a4", margin: 2cm, numbering: "1")
#set text(lang: "en")
#set par(justify: true)
#align(center)[$title$]
#emph[$title$]
$body$
"""


def validate(text: str, context=None) -> TemplateValidationResult:
    return TemplateValidator().template_validate(text, context)


class TestBrackets:
    """Test per-kind bracket balance"""

    def test_unclosed_paren(self):
        result = validate("#set page(margin: (x: 1cm)\n$body$")
        assert result.errors == ["Unclosed parentheses starting at line 1"]
        assert not result.is_valid

    def test_unmatched_closer_position(self):
        result = validate("$body$ )")
        assert "Unmatched closing parentheses at line 1, column 8" in result.errors

    def test_unclosed_brace_line(self):
        result = validate("$body$\n\n#let f(x) = {\n  x\n")
        assert "Unclosed curly braces starting at line 3" in result.errors

    def test_content_block_unbalanced(self):
        result = validate("#box[\n$body$")

        assert "Unclosed square brackets starting at line 1" in result.errors
        assert "Unbalanced content blocks: 1 unclosed bracket(s)" in result.errors

    def test_extra_closing_block(self):
        result = validate("$body$]")
        assert "Unbalanced content blocks: 1 extra closing bracket(s)" in result.errors

    def test_brackets_inside_strings_ignored_for_blocks(self):
        result = validate('#text("[")\n$body$')

        assert "Unclosed square brackets starting at line 1" in result.errors
        assert not any(e.startswith("Unbalanced content blocks") for e in result.errors)


class TestStrings:
    """Test quote parity"""

    def test_unclosed_string(self):
        result = validate('#set text(lang: "en)\n$body$')
        assert "Unclosed string literal detected" in result.errors

    def test_balanced_strings(self):
        assert "Unclosed string literal detected" not in validate(CLEAN).errors


class TestNamesAndFunctions:
    """Test variable-name legality, function allowlist and typos"""

    def test_digit_start_name(self):
        result = validate("$1abc$ $body$")
        assert result.errors[0].startswith("Invalid variable name '1abc' at line 1.")

    def test_punctuation_name(self):
        result = validate("$body$\n$font-size$")
        assert result.errors == [
            "Invalid variable name 'font-size' at line 2. Variable names must start with "
            "a letter or underscore and contain only letters, numbers, and underscores."
        ]

    def test_spaced_placeholders_legal(self):
        """Two placeholders separated by a space are not one bad name"""
        assert validate("$title$ $body$").errors == []

    def test_unknown_function(self):
        result = validate("$body$\n#foo(1)")
        assert (
            "Unknown function 'foo' at line 2. This may be a custom function or newer "
            "Typst feature."
        ) in result.warnings

    def test_known_function(self):
        assert not any("Unknown function" in w for w in validate(CLEAN).warnings)

    def test_typo(self):
        result = validate("$titel$ $body$")
        assert "Variable 'titel' might be a typo. Did you mean 'title'?" in result.warnings


class TestStructure:
    """Test $body$ gate, setup and pattern warnings"""

    def test_body_required(self):
        result = validate("#set page(margin: 1cm)\n$title$")
        assert "Template must contain a '$body$' variable to include the main content" in result.errors

    def test_missing_setup(self):
        result = validate("$body$")
        assert result.warnings[0] == (
            "Template may be missing common setup: #set page, #set text, #set par. "
            "This is not an error but may result in default formatting."
        )
        assert result.is_valid

    def test_adjacent_variables(self):
        result = validate("$title$$body$")
        assert "Adjacent variables without spacing may cause formatting issues" in result.warnings

    def test_no_variables(self):
        result = validate("static")
        assert "Template contains no variables. This may be intentional for static templates." in result.warnings

    def test_single_use(self):
        result = validate("$author$ $body$")

        assert "Variable 'author' is used only once. Verify this is intentional." in result.warnings
        assert not any("'body' is used only once" in w for w in result.warnings)

    def test_clean_template(self):
        result = validate(CLEAN)

        assert result.errors == []
        assert result.warnings == []
        assert result.variables == ["title", "body"]


class TestContext:
    """Test validation against a substitution context"""

    def test_body_missing(self):
        result = validate(CLEAN, {"title": "T"})
        assert result.errors == ["Required variable 'body' is missing from context"]

    def test_body_empty(self):
        result = validate(CLEAN, {"body": ""})
        assert "Required variable 'body' is missing from context" in result.errors

    def test_implicit_default_no_warning(self):
        assert validate(CLEAN, {"body": "x"}).warnings == []

    def test_optional_without_default(self):
        result = validate(CLEAN.replace("$title$", "$subtitle$"), {"body": "x"})
        assert "Optional variable 'subtitle' is not provided and has no default value" in result.warnings


class TestFeatures:
    """Test version, paper and page setup warnings"""

    def test_context_feature(self):
        result = validate(CLEAN + "#context counter(page).display()\n")
        assert "Template uses context blocks (Typst 0.11+). Ensure Typst version 0.11+ is available." in result.warnings

    def test_unknown_paper(self):
        result = validate(CLEAN.replace('"a4"', '"a7"'))
        assert any(w.startswith("Unknown paper size 'a7'.") for w in result.warnings)

    def test_font_tuple(self):
        result = validate(CLEAN + '#set text(font: ("A", "B"))\n')
        assert "Using tuple syntax for fonts. Consider using string syntax for better compatibility." in result.warnings

    def test_language_missing(self):
        result = validate(CLEAN.replace('#set text(lang: "en")', "#set text(size: 11pt)"))
        assert any(w.startswith("Template does not specify language.") for w in result.warnings)

    def test_margins_missing(self):
        result = validate(CLEAN.replace("margin: 2cm, ", ""))
        assert any(w.startswith("Page setup found but no margins specified.") for w in result.warnings)

    def test_header_without_numbering(self):
        text = CLEAN.replace('numbering: "1"', "header: [x]")
        assert any(w.startswith("Template has header/footer but no page numbering.")
                   for w in validate(text).warnings)


class TestResult:
    """Test the aggregate result and helpers"""

    def test_validity_derived(self):
        result = TemplateValidationResult(errors=["x"])

        assert not result.is_valid
        result.errors.clear()
        assert result.is_valid
        with pytest.raises(AttributeError):
            result.is_valid = False

    def test_to_dict(self):
        data = validate(CLEAN).to_dict()
        assert data == {"isValid": True, "errors": [], "warnings": [], "variables": ["title", "body"]}

    def test_quick_validate(self):
        assert quick_validate(CLEAN)
        assert not quick_validate("")
        assert not quick_validate("$title$")
        assert not quick_validate("$body$ [")

    def test_summary(self):
        summary = summary_format(validate("#box[\n$body$"))

        assert summary.startswith("Template validation failed\nFound 1 variables: body\n")
        assert "\nErrors (2):\n• Unclosed square brackets starting at line 1" in summary
