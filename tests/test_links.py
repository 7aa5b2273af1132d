"""
Wikilink and embed tests

Tests wikilink to markdown link conversion (extension handling, headings,
aliases, base URL) and embed conversion by file type, including deferred
markers and their worklists.
"""

import pytest

from mdtypst.config import WikilinkConfig, appsettings
from mdtypst.lib.embeds import LINK_ICONS, EmbedResolver, baseName_get, extension_get, fileName_get
from mdtypst.lib.wikilinks import (
    WIKILINK_PATTERN,
    WikilinkResolver,
    heading_anchorize,
    path_sanitize,
)
from mdtypst.models import FileKind, PreprocessingResult


def wikilinks(content: str, fmt: str = "md", base_url: str = "") -> PreprocessingResult:
    result = PreprocessingResult(content=content)
    resolver = WikilinkResolver(WikilinkConfig(format=fmt), base_url=base_url)
    result.content = resolver.wikilinks_convert(content, result)
    return result


def embeds(content: str, defer_images: bool = True) -> PreprocessingResult:
    result = PreprocessingResult(content=content)
    result.content = EmbedResolver(defer_images=defer_images).embeds_convert(content, result)
    return result


class TestWikilinks:
    """Test [[target#heading|alias]] conversion"""

    def test_plain(self):
        assert wikilinks("[[My Note]]").content == "[My Note](My%20Note.md)"

    def test_heading_and_alias(self):
        result = wikilinks("[[My Note#Section Two|See here]]")
        assert result.content == "[See here](My%20Note.md#section-two)"

    def test_heading_without_alias(self):
        assert wikilinks("[[Note#Intro]]").content == "[Note#Intro](Note.md#intro)"

    def test_format_none(self):
        assert wikilinks("[[Note]]", fmt="none").content == "[Note](Note)"

    def test_base_url(self):
        result = wikilinks("[[Note]]", base_url="https://notes.example.org")
        assert result.content == "[Note](https://notes.example.org/Note.md)"

    def test_base_url_not_applied_to_absolute(self):
        result = wikilinks("[[/abs/Note]]", base_url="https://notes.example.org/")
        assert result.content == "[/abs/Note](/abs/Note.md)"

    def test_parts_trimmed(self):
        assert wikilinks("[[ Note | Alias ]]").content == "[Alias](Note.md)"

    def test_empty_target_kept(self):
        """A whitespace-only target is left as written with a warning"""
        result = wikilinks("see [[ ]] here")

        assert result.content == "see [[ ]] here"
        assert result.warnings == ["Empty wikilink path found: [[ ]]"]

    def test_malformed_untouched(self):
        """Unclosed brackets and heading-only links are not rewritten"""
        for content in ("[[broken link", "[[#Heading]]", "[[]]"):
            result = wikilinks(content)

            assert result.content == content
            assert result.warnings == []

    def test_several_links(self):
        result = wikilinks("[[A]], [[B|b]] and [[C#D]]")
        assert result.content == "[A](A.md), [b](B.md) and [C#D](C.md#d)"

    def test_link_has_no_wikilink_syntax(self):
        """A built link is not picked up again by the wikilink pattern"""
        link = WikilinkResolver(WikilinkConfig(format="none")).link_build("Folder/Some Note")
        assert link == "[Folder/Some Note](Folder/Some%20Note)"
        assert WIKILINK_PATTERN.search(link) is None

    def test_config_rejects_unknown_format(self):
        with pytest.raises(ValueError):
            WikilinkConfig(format="html")


class TestLinkHelpers:
    """Test path sanitizing and heading anchors"""

    def test_path_sanitize(self):
        assert path_sanitize("Folder\\My Note?") == "Folder/My%20Note_"

    def test_path_sanitize_reserved(self):
        assert path_sanitize('a<b>c:d"e|f*g') == "a_b_c_d_e_f_g"

    def test_anchor(self):
        assert heading_anchorize("Section  Two (draft)") == "section-two-draft"

    def test_anchor_collapses_dashes(self):
        assert heading_anchorize("A - B") == "a-b"

    def test_anchor_unicode_letters_kept(self):
        assert heading_anchorize("Über Café") == "über-café"


class TestEmbedHelpers:
    """Test path splitting helpers"""

    def test_extension(self):
        assert extension_get("img/Chart.PNG") == ".png"
        assert extension_get("Makefile") == ""
        assert extension_get(".hidden") == ""

    def test_file_and_base_name(self):
        assert fileName_get("a/b/report.v2.pdf") == "report.v2.pdf"
        assert baseName_get("report.v2.pdf") == "report.v2"


class TestDeferredEmbeds:
    """Test image and PDF markers"""

    def test_image_marker(self):
        result = embeds("![[img/chart.png|300]]")
        descriptor = result.metadata.image_embeds[0]

        assert result.content == "IMAGE_EMBED_MARKER:img/chart.png:chart:300"
        assert descriptor.original_path == "img/chart.png"
        assert descriptor.file_name == "chart.png"
        assert descriptor.base_name == "chart"
        assert descriptor.size_or_alt == "300"
        assert descriptor.kind == "image"
        assert result.warnings == ["Image embed queued for processing: img/chart.png"]

    def test_pdf_marker(self):
        result = embeds("![[docs/Annual Report.pdf]]")
        descriptor = result.metadata.pdf_embeds[0]

        assert result.content == "TYPST_PDF_EMBED_MARKER:docs/Annual Report.pdf:Annual Report:"
        assert descriptor.sanitized_path == "docs/Annual%20Report.pdf"
        assert descriptor.options is None
        assert result.warnings == [
            "PDF embed queued for processing with Typst pdf.embed: docs/Annual Report.pdf"
        ]

    def test_worklist_order(self):
        """Descriptors are queued in document order"""
        result = embeds("![[b.png]] text ![[a.jpg]] ![[c.pdf]] ![[d.gif]]")

        assert [d.file_name for d in result.metadata.image_embeds] == ["b.png", "a.jpg", "d.gif"]
        assert [d.file_name for d in result.metadata.pdf_embeds] == ["c.pdf"]

    def test_marker_in_content_matches_descriptor(self):
        result = embeds("before ![[x.webp|Alt text]] after")
        marker = result.metadata.image_embeds[0].marker

        assert result.content == f"before {marker} after"
        assert appsettings.marker_parse(marker)["extra"] == "Alt text"

    def test_uppercase_extension(self):
        result = embeds("![[PHOTO.PNG]]")
        assert len(result.metadata.image_embeds) == 1

    def test_colon_in_path_warns(self):
        result = embeds("![[C:/scans/page.png]]")
        assert any("cannot be split unambiguously" in w for w in result.warnings)


class TestLinkedEmbeds:
    """Test embeds downgraded to links"""

    def test_video(self):
        result = embeds("![[clips/demo video.mp4]]")

        assert result.content == f"[{LINK_ICONS[FileKind.VIDEO]} demo video.mp4](clips/demo%20video.mp4)"
        assert result.warnings == ["Video embed converted to link: clips/demo video.mp4"]

    def test_audio(self):
        result = embeds("![[voice.m4a]]")

        assert result.content == f"[{LINK_ICONS[FileKind.AUDIO]} voice.m4a](voice.m4a)"
        assert result.warnings == ["Audio embed converted to link: voice.m4a"]

    def test_document(self):
        result = embeds("![[notes.txt]]")

        assert result.content == f"[{LINK_ICONS[FileKind.DOCUMENT]} notes.txt](notes.txt)"
        assert result.warnings == []

    def test_unknown(self):
        result = embeds("![[data.xyz]]")

        assert result.content == "[data.xyz](data.xyz)"
        assert result.warnings == ["Unknown file type for embed: data.xyz"]

    def test_empty_path(self):
        result = embeds("![[ ]]")

        assert result.content == "![[ ]]"
        assert result.warnings == ["Empty embed path found: ![[ ]]"]


class TestInlineImages:
    """Test the legacy image form used without deferral"""

    def test_size(self):
        result = embeds("![[a b.png|300x200]]", defer_images=False)

        assert result.content == '<img src="a%20b.png" width="300" height="200" alt="" />'
        assert result.metadata.image_embeds == []

    def test_width_only(self):
        result = embeds("![[a.png|300]]", defer_images=False)
        assert result.content == '<img src="a.png" width="300" alt="" />'

    def test_alt_text(self):
        assert embeds("![[a.png|Alt text]]", defer_images=False).content == "![Alt text](a.png)"

    def test_bare(self):
        assert embeds("![[a.png]]", defer_images=False).content == "![](a.png)"

    def test_pdf_still_deferred(self):
        result = embeds("![[doc.pdf]]", defer_images=False)
        assert result.content.startswith("TYPST_PDF_EMBED_MARKER:")
