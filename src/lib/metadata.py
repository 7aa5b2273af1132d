"""
Document metadata extraction

Inline hashtags, word count and the first-heading title. All functions are
pure and operate on plain strings.
"""

import re
from typing import List, Optional


FENCED_CODE_PATTERN = re.compile(r'```[\s\S]*?```')
INLINE_CODE_PATTERN = re.compile(r'`[^`\n]*`')

# A tag follows start-of-line or whitespace, starts with a letter and does not
# end on a separator. The single-character alternative covers short tags.
TAG_PATTERN = re.compile(
    r'(?:^|\s)#([a-zA-Z][a-zA-Z0-9_/-]*[a-zA-Z0-9_]|[a-zA-Z][a-zA-Z0-9_]*)',
    re.MULTILINE,
)

# Characters scanned before a match for the ATX-heading heuristic
HEADING_LOOKBEHIND = 5

MARKUP_PATTERN = re.compile(r'[#*_`~\[\]()]')
HEADING_PATTERN = re.compile(r'^#+\s+(.+)$', re.MULTILINE)


def code_strip(content: str) -> str:
    """Remove fenced code blocks, then inline code spans"""
    return INLINE_CODE_PATTERN.sub('', FENCED_CODE_PATTERN.sub('', content))


def tags_extract(content: str) -> List[str]:
    """
    Extract inline hashtags in order of first appearance.

    Code is stripped first so `#include` in a snippet is not a tag. A match
    is rejected when another '#' appears within the few characters before
    it, which filters out headings like "## Heading". The same window also
    drops a short tag that closely follows another one: "#a #b" yields
    only "a".

    Args:
        content: Markdown text

    Returns:
        Distinct tag names without the leading '#'

    Example:
        >>> tags_extract("#alpha #beta #alpha")
        ['alpha', 'beta']
    """
    text = code_strip(content)
    tags: List[str] = []

    for match in TAG_PATTERN.finditer(text):
        start = match.start()
        if '#' in text[max(0, start - HEADING_LOOKBEHIND):start]:
            continue
        tag = match.group(1)
        if tag not in tags:
            tags.append(tag)

    return tags


def wordCount_calculate(content: str) -> int:
    """
    Count whitespace-separated words after removing markdown punctuation.

    Example:
        >>> wordCount_calculate("# Title\\n\\n**bold** text")
        3
    """
    return len(MARKUP_PATTERN.sub('', content).split())


def title_extract(content: str) -> Optional[str]:
    """Text of the first ATX heading, or None"""
    match = HEADING_PATTERN.search(content)
    if match:
        return match.group(1).strip()
    return None
