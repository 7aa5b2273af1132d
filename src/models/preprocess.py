"""
Preprocessor data models

Type-safe structures carried through the markdown preprocessing passes.
"""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional


@dataclass
class EmbedDescriptor:
    """
    One embed rewritten to a deferred-resolution marker

    Created by the embed pass and appended to the metadata worklist. The
    preprocessor never resolves the marker itself; an external resolver with
    file-system access finds `marker` in the output and replaces it.

    Attributes:
        original_path: Embed path exactly as the author wrote it
        sanitized_path: Path after link sanitization (spaces -> %20, etc.)
        file_name: Last path segment (e.g., "chart.png")
        base_name: File name without extension (e.g., "chart")
        options: Raw trailing embed parameter, for images a size or alt text
        marker: Sentinel string placed in the content
        kind: "image" or "pdf"

    Example:
        For "![[img/chart.png|300]]":
        EmbedDescriptor(
            original_path="img/chart.png",
            sanitized_path="img/chart.png",
            file_name="chart.png",
            base_name="chart",
            options="300",
            marker="IMAGE_EMBED_MARKER:img/chart.png:chart:300",
            kind="image"
        )
    """
    original_path: str
    sanitized_path: str
    file_name: str
    base_name: str
    options: Optional[str]
    marker: str
    kind: str = "image"

    @property
    def size_or_alt(self) -> Optional[str]:
        """Image embeds call the trailing parameter size-or-alt"""
        return self.options


@dataclass
class DocumentMetadata:
    """
    Metadata accumulated while a document is processed

    Attributes:
        tags: Ordered, duplicate-free tag names (frontmatter tags first)
        frontmatter: Parsed frontmatter mapping, None when absent
        title: Document title (override > frontmatter > first heading)
        word_count: Words in the final normalized content
        pdf_embeds: Worklist of PDF markers for the external resolver
        image_embeds: Worklist of image markers for the external resolver
    """
    tags: List[str] = field(default_factory=list)
    frontmatter: Optional[Dict[str, Any]] = None
    title: Optional[str] = None
    word_count: int = 0
    pdf_embeds: List[EmbedDescriptor] = field(default_factory=list)
    image_embeds: List[EmbedDescriptor] = field(default_factory=list)

    def tag_add(self, tag: str) -> bool:
        """Append a tag unless already present; returns True if added"""
        if tag in self.tags:
            return False
        self.tags.append(tag)
        return True


@dataclass
class PreprocessingResult:
    """
    Result of one Preprocessor.process() call

    The content string is replaced pass by pass; errors and warnings are
    plain messages meant to be shown verbatim to the user.

    Attributes:
        content: Normalized markdown text
        metadata: Tags, frontmatter, title, word count and embed worklists
        errors: Messages for passes that failed (processing still continued)
        warnings: Non-fatal notices (queued embeds, fallbacks, empty links)
    """
    content: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for the JSON sidecar, with frontmatter values made serializable"""
        data = asdict(self)
        if self.metadata.frontmatter is not None:
            data["metadata"]["frontmatter"] = frontmatter_normalize(self.metadata.frontmatter)
        return data


def value_normalize(value: Any) -> Any:
    """
    Fold an arbitrary YAML value into the closed frontmatter variant.

    Strings, numbers, booleans and None pass through; lists become lists of
    strings; mappings are normalized recursively; dates and anything else
    are stringified.

    Example:
        >>> value_normalize([1, "a"])
        ['1', 'a']
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return [item if isinstance(item, str) else str(item) for item in value]
    if isinstance(value, dict):
        return frontmatter_normalize(value)
    return str(value)


def frontmatter_normalize(data: Dict[Any, Any]) -> Dict[str, Any]:
    """Normalize every key to str and every value via value_normalize()"""
    return {str(key): value_normalize(value) for key, value in data.items()}
