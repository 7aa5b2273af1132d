"""
Embed resolution.

Rewrites `![[path|sizeOrAlt]]` by file type:

    image     -> IMAGE_EMBED_MARKER:...      queued in metadata.image_embeds
    pdf       -> TYPST_PDF_EMBED_MARKER:...  queued in metadata.pdf_embeds
    video     -> [🎥 name](path)             with a warning
    audio     -> [🎵 name](path)             with a warning
    document  -> [📄 name](path)
    unknown   -> [path](path)                with a warning

Images and PDFs are not resolved here. The marker is left in the text for a
collaborator with file-system access, which uses the queued descriptors as
its worklist.

This pass must run before wikilink conversion: an embed contains a
wikilink and would otherwise gain a note extension.
"""

import re
from typing import Optional

from ..config.settings import appsettings
from ..models.callouts import FileKind, fileKind_classify
from ..models.preprocess import EmbedDescriptor, PreprocessingResult
from .log import LOG
from .wikilinks import path_sanitize


EMBED_PATTERN = re.compile(r'!\[\[([^|\]]+)(?:\|([^\]]+))?\]\]')
EMBED_SIZE_PATTERN = re.compile(r'(\d+)(?:x(\d+))?')
EXTENSION_PATTERN = re.compile(r'\.[^/.]+$')

LINK_ICONS = {
    FileKind.VIDEO: '🎥',
    FileKind.AUDIO: '🎵',
    FileKind.DOCUMENT: '📄',
}


def extension_get(path: str) -> str:
    """Lower-cased extension including the dot, '' for none or dot-files"""
    dot = path.rfind('.')
    return path[dot:].lower() if dot > 0 else ''


def fileName_get(path: str) -> str:
    return path[path.rfind('/') + 1:]


def baseName_get(file_name: str) -> str:
    return EXTENSION_PATTERN.sub('', file_name)


class EmbedResolver:
    """
    Converts embeds according to their file type.

    Attributes:
        defer_images: True emits image markers for later resolution; False
                      uses the legacy inline form (`<img>` with size, or
                      markdown image syntax with alt text)
    """

    def __init__(self, defer_images: bool = True):
        self.defer_images = defer_images

    def embeds_convert(self, content: str, result: PreprocessingResult) -> str:
        """
        Rewrite every embed in `content`.

        An empty path or a failing conversion keeps the original text and
        records a warning; remaining embeds are still converted.
        """
        count = 0

        def embed_replace(match: 're.Match[str]') -> str:
            nonlocal count
            original = match.group(0)
            try:
                path = match.group(1).strip()
                if not path:
                    result.warnings.append(f"Empty embed path found: {original}")
                    return original
                converted = self.embed_convert(path, match.group(2), result)
            except Exception as e:
                result.warnings.append(f"Failed to process embed: {original} - {e}")
                return original
            LOG(f"Embed {original} -> {converted}", level=3)
            count += 1
            return converted

        converted = EMBED_PATTERN.sub(embed_replace, content)
        LOG(f"Embeds converted: {count}", level=2)
        return converted

    def embed_convert(self, path: str, option: Optional[str], result: PreprocessingResult) -> str:
        """Dispatch one embed on its file kind"""
        kind = fileKind_classify(extension_get(path))

        if kind is FileKind.IMAGE:
            if self.defer_images:
                return self.marker_queue('image', path, option, result)
            return self.image_inline(path, option)

        if kind is FileKind.PDF:
            return self.marker_queue('pdf', path, option, result)

        if kind in LINK_ICONS:
            if kind is FileKind.VIDEO:
                result.warnings.append(f"Video embed converted to link: {path}")
            elif kind is FileKind.AUDIO:
                result.warnings.append(f"Audio embed converted to link: {path}")
            return f"[{LINK_ICONS[kind]} {fileName_get(path)}]({path_sanitize(path)})"

        result.warnings.append(f"Unknown file type for embed: {path}")
        return f"[{path}]({path})"

    def marker_queue(
        self, kind: str, path: str, option: Optional[str], result: PreprocessingResult
    ) -> str:
        """
        Emit a deferred-resolution marker and queue its descriptor.

        Args:
            kind: "image" or "pdf"
            path: Embed path as written
            option: Raw trailing embed parameter
            result: Result receiving the descriptor and warnings

        Returns:
            The marker string
        """
        file_name = fileName_get(path)
        base_name = baseName_get(file_name)
        marker = appsettings.marker_make(kind, path, base_name, option)

        descriptor = EmbedDescriptor(
            original_path=path,
            sanitized_path=path_sanitize(path),
            file_name=file_name,
            base_name=base_name,
            options=option,
            marker=marker,
            kind=kind,
        )

        if kind == 'pdf':
            result.metadata.pdf_embeds.append(descriptor)
            result.warnings.append(f"PDF embed queued for processing with Typst pdf.embed: {path}")
        else:
            result.metadata.image_embeds.append(descriptor)
            result.warnings.append(f"Image embed queued for processing: {path}")

        if ':' in path:
            result.warnings.append(
                f"Embed path contains ':' and its marker cannot be split unambiguously: {path}"
            )
        return marker

    def image_inline(self, path: str, option: Optional[str]) -> str:
        """
        Legacy image form used when images are not deferred.

        Example:
            >>> EmbedResolver(defer_images=False).image_inline('a b.png', '300x200')
            '<img src="a%20b.png" width="300" height="200" alt="" />'
        """
        sanitized = path_sanitize(path)
        if not option:
            return f"![]({sanitized})"

        size = EMBED_SIZE_PATTERN.search(option)
        if size:
            width, height = size.group(1), size.group(2)
            height_attr = f' height="{height}"' if height else ''
            return f'<img src="{sanitized}" width="{width}"{height_attr} alt="" />'
        return f"![{option}]({sanitized})"
