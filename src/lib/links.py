"""
Noise-link filter

Removes link patterns that only make sense inside the note-taking app:
"Open:" alias wikilinks generated by mail importers and Mail.app deep
links. Runs as its own pass and again on each email block body.
"""

import re
from typing import Optional

from ..models.preprocess import PreprocessingResult
from .log import LOG


OPEN_ALIAS_PATTERN = re.compile(r'\[\[.*?\|Open:.*?\]\]')
MAIL_APP_PATTERN = re.compile(r'\[Open in Mail\.app\]\(message://[^)]+\)')
EXCESS_NEWLINES_PATTERN = re.compile(r'\n{3,}')


def links_filter(content: str, result: Optional[PreprocessingResult] = None) -> str:
    """
    Strip app-only links and collapse the blank lines they leave behind.

    Args:
        content: Markdown text
        result: Optional result collecting a warning if filtering fails

    Returns:
        Filtered text

    Example:
        >>> links_filter("Hi [[mail|Open: mail]]\\n\\n\\n\\nBye")
        'Hi \\n\\nBye'
    """
    try:
        filtered = OPEN_ALIAS_PATTERN.sub('', content)
        filtered = MAIL_APP_PATTERN.sub('', filtered)
        filtered = EXCESS_NEWLINES_PATTERN.sub('\n\n', filtered)
    except Exception as e:
        if result is not None:
            result.warnings.append(f"Error filtering unnecessary links: {e}")
        return content

    if filtered != content:
        LOG(f"Link filter removed {len(content) - len(filtered)} characters", level=2)
    return filtered
