"""
Wikilink resolution.

Rewrites `[[target#heading|alias]]` into `[display](path#anchor)`. Only
matches of the wikilink pattern are touched; malformed brackets are left
exactly as written.
"""

import re
from typing import Optional

from ..config.options import WikilinkConfig
from ..models.preprocess import PreprocessingResult
from .log import LOG


WIKILINK_PATTERN = re.compile(r'\[\[([^#|\]]+)(?:#([^|\]]+))?(?:\|([^\]]+))?\]\]')


def path_sanitize(path: str) -> str:
    """
    Make a note or attachment path safe for a markdown link target.

    Example:
        >>> path_sanitize('Folder\\\\My Note?')
        'Folder/My%20Note_'
    """
    path = re.sub(r'[<>:"|?*]', '_', path)
    path = re.sub(r'\s+', '%20', path)
    return re.sub(r'[\\/]', '/', path)


def heading_anchorize(heading: str) -> str:
    """
    Lower-case, dash-joined anchor for a heading.

    Example:
        >>> heading_anchorize('Section  Two (draft)')
        'section-two-draft'
    """
    anchor = re.sub(r'\s+', '-', heading.lower())
    anchor = re.sub(r'[^\w\-]', '', anchor)
    return re.sub(r'--+', '-', anchor)


class WikilinkResolver:
    """
    Converts wikilinks to markdown links.

    Attributes:
        config: Extension handling ("md" appends config.extension)
        base_url: Prefix for targets that are not already absolute
    """

    def __init__(self, config: Optional[WikilinkConfig] = None, base_url: str = ""):
        self.config = config or WikilinkConfig.from_settings()
        self.base_url = base_url or ""

    def url_resolve(self, path: str) -> str:
        if not self.base_url or path.startswith('/'):
            return path
        base = self.base_url if self.base_url.endswith('/') else f"{self.base_url}/"
        return f"{base}{path}"

    def link_build(self, target: str, heading: str = "", alias: str = "") -> str:
        """
        Build the markdown link for already-trimmed wikilink parts.

        Example:
            >>> WikilinkResolver(WikilinkConfig()).link_build('My Note', 'Section Two', 'See here')
            '[See here](My%20Note.md#section-two)'
        """
        final_path = path_sanitize(target)
        if self.config.format == 'md':
            final_path += self.config.extension
        if heading:
            final_path += f"#{heading_anchorize(heading)}"

        if alias:
            display = alias
        elif heading:
            display = f"{target}#{heading}"
        else:
            display = target

        return f"[{display}]({self.url_resolve(final_path)})"

    def wikilinks_convert(self, content: str, result: PreprocessingResult) -> str:
        """
        Rewrite every wikilink in `content`.

        An empty target or a failing conversion keeps the original text and
        records a warning; remaining links are still converted.
        """
        count = 0

        def link_replace(match: 're.Match[str]') -> str:
            nonlocal count
            original = match.group(0)
            try:
                target = (match.group(1) or '').strip()
                heading = (match.group(2) or '').strip()
                alias = (match.group(3) or '').strip()
                if not target:
                    result.warnings.append(f"Empty wikilink path found: {original}")
                    return original
                link = self.link_build(target, heading, alias)
            except Exception as e:
                result.warnings.append(f"Failed to process wikilink: {original} - {e}")
                return original
            LOG(f"Wikilink {original} -> {link}", level=3)
            count += 1
            return link

        converted = WIKILINK_PATTERN.sub(link_replace, content)
        LOG(f"Wikilinks converted: {count}", level=2)
        return converted
