"""
Callout and embed classification models

Defines the fixed callout style table, the fold states a callout header can
carry, and the file-extension tables used to classify embeds.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set


class FoldState(Enum):
    """
    Fold marker following the callout tag

    Output is static, so the state only selects a cosmetic glyph.
    """
    NONE = "none"            # > [!note]
    EXPANDED = "expanded"    # > [!note]+
    COLLAPSED = "collapsed"  # > [!note]-

    @classmethod
    def from_marker(cls, marker: str) -> "FoldState":
        """Map '+', '-' or '' to a FoldState"""
        return {"+": cls.EXPANDED, "-": cls.COLLAPSED}.get(marker, cls.NONE)

    @property
    def glyph(self) -> str:
        return FOLD_GLYPHS[self]


FOLD_GLYPHS: Dict[FoldState, str] = {
    FoldState.NONE: "",
    FoldState.EXPANDED: "🔽",
    FoldState.COLLAPSED: "🔼",
}


@dataclass
class CalloutStyle:
    """
    Display information for one callout type

    Attributes:
        label: Header text used when the callout has no title
        icon: Emoji prefixed to the header
        style_class: Class name emitted in the leading comment line
    """
    label: str
    icon: str
    style_class: str


@dataclass
class CalloutBlock:
    """
    A callout being accumulated by the converter (transient)

    Attributes:
        type: Lower-cased callout tag (e.g., "warning")
        fold_state: Fold marker on the header line
        title: Text after the tag on the header line, None if empty
        body_lines: Body lines with the '>' prefix removed. Blank entries are
                    paragraph breaks inside the callout.
    """
    type: str
    fold_state: FoldState = FoldState.NONE
    title: Optional[str] = None
    body_lines: List[str] = field(default_factory=list)


CALLOUT_STYLES: Dict[str, CalloutStyle] = {
    "note":     CalloutStyle("Note",     "📝", "callout-note"),
    "abstract": CalloutStyle("Abstract", "📋", "callout-abstract"),
    "info":     CalloutStyle("Info",     "ℹ️", "callout-info"),
    "tip":      CalloutStyle("Tip",      "💡", "callout-tip"),
    "success":  CalloutStyle("Success",  "✅", "callout-success"),
    "question": CalloutStyle("Question", "❓", "callout-question"),
    "warning":  CalloutStyle("Warning",  "⚠️", "callout-warning"),
    "failure":  CalloutStyle("Failure",  "❌", "callout-failure"),
    "danger":   CalloutStyle("Danger",   "⚡", "callout-danger"),
    "bug":      CalloutStyle("Bug",      "🐛", "callout-bug"),
    "example":  CalloutStyle("Example",  "📋", "callout-example"),
    "quote":    CalloutStyle("Quote",    "💬", "callout-quote"),
    "cite":     CalloutStyle("Citation", "📖", "callout-cite"),
}


def calloutStyle_get(callout_type: str) -> CalloutStyle:
    """
    Look up the style for a callout type, case-insensitively

    Unknown types get a generic pin icon and a capitalised label.

    Example:
        >>> calloutStyle_get('custom').label
        'Custom'
    """
    style = CALLOUT_STYLES.get(callout_type.lower())
    if style is not None:
        return style
    return CalloutStyle(
        label=callout_type[:1].upper() + callout_type[1:],
        icon="📌",
        style_class="callout-default",
    )


class FileKind(Enum):
    """Embed classification by file extension"""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    PDF = "pdf"
    UNKNOWN = "unknown"


FILE_EXTENSIONS: Dict[FileKind, Set[str]] = {
    FileKind.IMAGE: {'.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp', '.bmp', '.ico', '.tiff'},
    FileKind.VIDEO: {'.mp4', '.avi', '.mov', '.wmv', '.flv', '.webm', '.mkv', '.m4v'},
    FileKind.AUDIO: {'.mp3', '.wav', '.ogg', '.m4a', '.flac', '.aac', '.wma'},
    FileKind.DOCUMENT: {'.md', '.txt', '.doc', '.docx', '.rtf'},
    FileKind.PDF: {'.pdf'},
}


def fileKind_classify(extension: str) -> FileKind:
    """Classify a lower-cased extension (with leading dot); '' is UNKNOWN"""
    for kind, extensions in FILE_EXTENSIONS.items():
        if extension in extensions:
            return kind
    return FileKind.UNKNOWN
