"""
Frontmatter pass tests

Tests YAML extraction, tag/title merge, keep/strip/synthesize output modes,
the line-scanner fallback and the "Document Information" display block.
"""

import json

import pytest

from mdtypst.config import PreprocessorOptions
from mdtypst.lib.frontmatter import (
    FrontmatterError,
    FrontmatterProcessor,
    frontmatter_display,
    frontmatter_strip,
    lines_scan,
    tags_fromFrontmatter,
    value_format,
    yaml_parse,
)
from mdtypst.models import PreprocessingResult


def frontmatter_strip_head(content: str) -> str:
    """Inside of the leading `---` block"""
    return content.split("---\n")[1]


def run(content: str, **options) -> PreprocessingResult:
    """Run only the frontmatter pass and return the result"""
    result = PreprocessingResult(content=content)
    processor = FrontmatterProcessor(PreprocessorOptions(**options))
    result.content = processor.frontmatter_process(content, result)
    return result


class TestExtraction:
    """Test tag and title extraction from valid YAML"""

    def test_list_tags_and_title(self):
        """Tags list and title land in metadata"""
        result = run("---\ntitle: Hello\ntags: [a, b]\n---\nBody")

        assert result.metadata.tags == ["a", "b"]
        assert result.metadata.title == "Hello"
        assert result.metadata.frontmatter == {"title": "Hello", "tags": ["a", "b"]}
        assert result.warnings == []

    def test_string_tags_split(self):
        """A tags string is split on commas and whitespace"""
        result = run("---\ntags: a, b c\n---\nBody")
        assert result.metadata.tags == ["a", "b", "c"]

    def test_numeric_tags_stringified(self):
        """Non-string list items become strings, empty ones are dropped"""
        assert tags_fromFrontmatter([2024, "", "x"]) == ["2024", "x"]
        assert tags_fromFrontmatter(None) == []

    def test_blank_title_ignored(self):
        """Whitespace-only title does not set metadata.title"""
        result = run("---\ntitle: '   '\n---\nBody")
        assert result.metadata.title is None

    def test_no_frontmatter(self):
        """Content without a block is returned unchanged"""
        result = run("# Heading\n\nBody")
        assert result.content == "# Heading\n\nBody"
        assert result.metadata.frontmatter is None

    def test_empty_block(self):
        """An empty block leaves content and metadata alone"""
        result = run("---\n\n---\nBody")
        assert result.content == "---\n\n---\nBody"
        assert result.metadata.frontmatter is None

    def test_title_override_without_block(self):
        """The override title lands in metadata even with no block"""
        result = run("# Heading\n\nBody", note_title="FromFile")

        assert result.metadata.title == "FromFile"
        assert result.metadata.frontmatter == {"title": "FromFile"}
        assert result.content == "---\ntitle: FromFile\n---\n# Heading\n\nBody"

    def test_empty_block_stripped(self):
        result = run("---\n\n---\nBody\n", preserve_frontmatter=False)

        assert result.content == "Body\n"
        assert result.metadata.frontmatter is None

    def test_empty_block_replaced_by_title(self):
        """An empty block is replaced, not stacked under a second block"""
        result = run("---\n\n---\nBody\n", note_title="T", preserve_frontmatter=False)

        assert result.content == "---\ntitle: T\n---\nBody\n"
        assert result.metadata.title == "T"

    def test_comment_only_block_with_title(self):
        result = run("---\n# nothing here\n---\nBody\n", note_title="T")

        assert result.content == "---\ntitle: T\n---\nBody\n"
        assert result.content.count("---") == 2


class TestOutputModes:
    """Test keep, strip and synthesize behaviour"""

    def test_preserve_reserializes(self):
        """Kept frontmatter is re-serialized as YAML"""
        result = run("---\ntitle: Hello\ntags: [a, b]\n---\nBody")
        assert result.content == "---\ntitle: Hello\ntags:\n- a\n- b\n---\nBody"

    def test_preserve_keeps_nested_structure(self):
        """Lists of mappings and numbers survive re-serialization"""
        text = "---\nauthors:\n  - name: Ann\n    mail: a@x.org\nsizes: [1, 2]\n---\nBody\n"
        result = run(text)
        head = yaml_parse(frontmatter_strip_head(result.content))

        assert head["authors"] == [{"name": "Ann", "mail": "a@x.org"}]
        assert head["sizes"] == [1, 2]
        assert result.content.endswith("---\nBody\n")

    def test_sidecar_still_normalized(self):
        result = run("---\nsizes: [1, 2]\n---\nBody")
        assert result.to_dict()["metadata"]["frontmatter"]["sizes"] == ["1", "2"]

    def test_strip(self):
        """preserve_frontmatter=False drops the block"""
        result = run("---\ntitle: Hello\n---\nBody", preserve_frontmatter=False)
        assert result.content == "Body"
        assert result.metadata.title == "Hello"

    def test_title_override_wins(self):
        """note_title replaces the frontmatter title"""
        result = run("---\ntitle: Old\nauthor: Ann\n---\nBody", note_title="Meeting")

        assert result.metadata.title == "Meeting"
        assert result.metadata.frontmatter["title"] == "Meeting"
        assert result.content == "---\ntitle: Meeting\nauthor: Ann\n---\nBody"

    def test_title_override_when_stripping(self):
        """Stripping with a title override keeps a title-only block"""
        result = run("---\nauthor: Ann\n---\nBody", preserve_frontmatter=False, note_title="Meeting")
        assert result.content == "---\ntitle: Meeting\n---\nBody"

    def test_title_block_synthesized(self):
        """A title override creates a block when there was none"""
        result = run("Body only", note_title="Meeting")
        assert result.content == "---\ntitle: Meeting\n---\nBody only"

    def test_dates_stringified(self):
        """YAML dates serialize as ISO strings"""
        result = run("---\ndate: 2024-05-01\n---\nBody")
        data = result.to_dict()

        assert data["metadata"]["frontmatter"]["date"] == "2024-05-01"
        json.dumps(data)
        assert "2024-05-01" in result.content


class TestFallback:
    """Test the line scanner used when YAML parsing fails"""

    def test_invalid_yaml_keeps_body(self):
        """Malformed YAML warns and falls back without losing text"""
        content = "---\ntitle: [unclosed\ntags: x, y\n---\nBody text"
        result = run(content)

        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Failed to parse frontmatter with YAML parser:")
        assert result.metadata.tags == ["x", "y"]
        assert result.metadata.title == "[unclosed"
        assert result.content == content

    def test_invalid_yaml_stripped(self):
        """Fallback still honours preserve_frontmatter=False"""
        result = run("---\ntitle: [unclosed\n---\nBody text", preserve_frontmatter=False)
        assert result.content == "Body text"

    def test_non_mapping(self):
        """A YAML list is not accepted as frontmatter"""
        result = run("---\n- a\n- b\n---\nBody")

        assert "expected a mapping" in result.warnings[0]
        assert result.metadata.frontmatter == {}
        assert result.content.endswith("Body")

    def test_yaml_parse_raises(self):
        """yaml_parse reports syntax errors as FrontmatterError"""
        with pytest.raises(FrontmatterError):
            yaml_parse("key: [1, 2")

    def test_lines_scan(self):
        """One pair per line, quotes trimmed, lines without key skipped"""
        assert lines_scan('title: "Hello"\ntags: a, b\n: orphan\nnoise') == {
            "title": "Hello",
            "tags": "a, b",
        }


class TestDisplay:
    """Test the readable frontmatter block"""

    def test_display_inserted(self):
        """print_frontmatter adds the display block before the body"""
        result = run("---\ntitle: Hi\ndue_date: soon\n---\nBody",
                     preserve_frontmatter=False, print_frontmatter=True)

        assert result.content.startswith("**Document Information**")
        assert "**Title:**\nHi" in result.content
        assert "**Due date:**\nsoon" in result.content
        assert result.content.endswith("\n\nBody")

    def test_display_after_kept_block(self):
        """Display block follows a preserved frontmatter block"""
        result = run("---\ntitle: Hi\n---\nBody", print_frontmatter=True)
        assert result.content.startswith("---\ntitle: Hi\n---\n\n**Document Information**")

    def test_empty_values_skipped(self):
        assert "Note" not in frontmatter_display({"title": "T", "note": ""})
        assert frontmatter_display({}) == ""

    def test_short_list_inline(self):
        assert value_format(["a", "b"]) == "a, b"

    def test_long_list_bulleted(self):
        assert value_format(["a", "b", "c", "d"]) == "\n\n- a\n- b\n- c\n- d\n"

    def test_long_comma_text_bulleted(self):
        text = ", ".join([f"participant number {i}" for i in range(6)])
        formatted = value_format(text)

        assert formatted.startswith("\n\n- participant number 0\n")
        assert formatted.count("\n- ") == 6

    def test_dict_as_json(self):
        assert value_format({"a": 1}) == '{"a": 1}'

    def test_bool_lowercase(self):
        assert value_format(True) == "true"


class TestStrip:
    """Test frontmatter_strip helper"""

    def test_strip_block(self):
        assert frontmatter_strip("---\na: 1\n---\nBody") == "Body"

    def test_strip_without_block(self):
        assert frontmatter_strip("Body\n---\n") == "Body\n---\n"
