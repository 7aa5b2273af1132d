"""
Per-call preprocessing options

AppSettings holds process-wide defaults read from the environment; these
small models are what the preprocessing passes actually receive, so a
caller can override a single field for one document without touching the
global settings.
"""

from typing import Optional

from pydantic import BaseModel, Field

from .settings import appsettings


class WikilinkConfig(BaseModel):
    """
    Wikilink target formatting.

    Attributes:
        format: "md" appends `extension` to targets, "none" leaves them bare
        extension: Extension appended in "md" mode
    """

    format: str = Field(default="md", pattern="^(md|none)$")
    extension: str = ".md"

    @classmethod
    def from_settings(cls) -> "WikilinkConfig":
        return cls(format=appsettings.link_format, extension=appsettings.link_extension)


class PreprocessorOptions(BaseModel):
    """
    Switches for one Preprocessor.

    Attributes:
        include_metadata: Extract inline hashtags into metadata.tags
        preserve_frontmatter: Keep the frontmatter block in the output
        print_frontmatter: Insert a "Document Information" block
        base_url: Prefix for relative wikilink targets
        note_title: Title override (e.g., the note's file name)
    """

    include_metadata: bool = True
    preserve_frontmatter: bool = True
    print_frontmatter: bool = False
    base_url: str = ""
    note_title: Optional[str] = None

    @classmethod
    def from_settings(cls, **overrides) -> "PreprocessorOptions":
        """
        Build options from the global settings, then apply overrides.

        Example:
            >>> PreprocessorOptions.from_settings(note_title="Meeting").note_title
            'Meeting'
        """
        values = {
            "include_metadata": appsettings.include_metadata,
            "preserve_frontmatter": appsettings.preserve_frontmatter,
            "print_frontmatter": appsettings.print_frontmatter,
            "base_url": appsettings.base_url,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
