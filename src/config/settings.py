"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use MDTYPST_ prefix (e.g., MDTYPST_PRESERVE_FRONTMATTER=false).

Settings can also be loaded from a .env file in the project root.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


MARKER_SUFFIX = "_EMBED_MARKER:"

# Marker prefix per embed kind, as located by the downstream resolver
MARKER_KINDS = {
    "image": "IMAGE",
    "pdf": "TYPST_PDF",
}


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use MDTYPST_ prefix.

    Examples:
        MDTYPST_LINK_FORMAT=none
        MDTYPST_BASE_URL=https://notes.example.org
        MDTYPST_CUSTOM_TEMPLATE_DIR=~/vault/Typst Templates
    """

    model_config = SettingsConfigDict(
        env_prefix="MDTYPST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Preprocessor configuration
    include_metadata: bool = Field(
        default=True,
        description="Extract inline hashtags into document metadata",
    )

    preserve_frontmatter: bool = Field(
        default=True,
        description="Keep the YAML frontmatter block in the normalized output",
    )

    print_frontmatter: bool = Field(
        default=False,
        description="Render frontmatter as a readable 'Document Information' block",
    )

    base_url: str = Field(
        default="",
        description="Prefix for relative wikilink targets (empty disables)",
    )

    link_format: str = Field(
        default="md",
        pattern="^(md|none)$",
        description="'md' appends link_extension to wikilink targets, 'none' leaves them bare",
    )

    link_extension: str = Field(
        default=".md",
        description="Extension appended to wikilink targets when link_format is 'md'",
    )

    normalize_rules: bool = Field(
        default=True,
        description="Rewrite dash horizontal rules so they are not read as YAML delimiters",
    )

    # Template configuration
    custom_template_dir: str = Field(
        default="Typst Templates",
        description="Directory scanned for user *.typ templates",
    )

    builtin_template_dir: str = Field(
        default=str(Path(__file__).resolve().parent.parent / "templates"),
        description="Directory holding the built-in templates shipped with the package",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: treat template warnings as errors",
    )

    def marker_make(self, kind: str, path: str, base_name: str, extra: Optional[str]) -> str:
        """
        Generate the deferred-resolution marker for an embed.

        The format is fixed because an external resolver pattern-matches it:
        fields are colon-joined and not escaped.

        Args:
            kind: Embed kind key ("image" or "pdf")
            path: Original embed path as written by the author
            base_name: File name without extension
            extra: Raw trailing embed parameter (size, alt text or options)

        Returns:
            Marker string (e.g., "IMAGE_EMBED_MARKER:img/a.png:a:300")

        Example:
            >>> settings = AppSettings()
            >>> settings.marker_make('pdf', 'doc.pdf', 'doc', None)
            'TYPST_PDF_EMBED_MARKER:doc.pdf:doc:'
        """
        return f"{MARKER_KINDS[kind]}{MARKER_SUFFIX}{path}:{base_name}:{extra or ''}"

    def marker_parse(self, marker: str) -> Optional[dict]:
        """
        Split a marker back into its fields.

        Only markers whose path and base name contain no colon can be split
        unambiguously; everything after the third colon is the extra field.

        Args:
            marker: Marker string produced by marker_make()

        Returns:
            Dict with kind, path, base_name and extra, or None if the string
            is not a marker

        Example:
            >>> settings = AppSettings()
            >>> settings.marker_parse('IMAGE_EMBED_MARKER:a.png:a:200x100')['extra']
            '200x100'
        """
        for kind, prefix in MARKER_KINDS.items():
            head = f"{prefix}{MARKER_SUFFIX}"
            if not marker.startswith(head):
                continue
            fields = marker[len(head):].split(":", 2)
            if len(fields) != 3:
                return None
            path, base_name, extra = fields
            return {"kind": kind, "path": path, "base_name": base_name, "extra": extra}
        return None


# Singleton instance - import this in your code
appsettings = AppSettings()
