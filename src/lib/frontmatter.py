"""
Frontmatter extraction and merge.

A note may start with a `---` delimited YAML block. The block is mined for
tags and title, optionally kept (re-serialized) in the output, and may be
rendered as a readable "Document Information" section.

Parsing uses PyYAML. When the block is not valid YAML (or not a mapping) a
warning is recorded and a line-oriented `key: value` scanner takes over, so
a malformed header never loses the body text.
"""

import json
import re
from typing import Any, Dict, List, Optional

import yaml

from ..config.options import PreprocessorOptions
from ..models.preprocess import PreprocessingResult, frontmatter_normalize
from .log import LOG


FRONTMATTER_PATTERN = re.compile(r'^---\s*\n([\s\S]*?)\n---\s*\n')
TAG_SPLIT_PATTERN = re.compile(r'[,\s]+')

# Display block layout
DISPLAY_HEADER = "**Document Information**"
LIST_INLINE_MAX = 3
COMMA_LIST_MIN_LENGTH = 80
WRAP_MIN_LENGTH = 100
WRAP_WIDTH = 80


class FrontmatterError(Exception):
    """Raised when a frontmatter block cannot be read as a YAML mapping"""
    pass


def yaml_dump(data: Dict[str, Any]) -> str:
    """
    Serialize a mapping the way it is written back into the note.

    The parsed structure is dumped as is (nested lists, mappings and dates
    included); normalization is only for the metadata sidecar.
    """
    return yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def yaml_parse(block: str) -> Dict[str, Any]:
    """
    Parse the inside of a frontmatter block.

    Raises:
        FrontmatterError: On YAML syntax errors or a non-mapping document
    """
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise FrontmatterError(str(e).replace('\n', ' '))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontmatterError(f"expected a mapping, got {type(data).__name__}")
    return data


def lines_scan(block: str) -> Dict[str, str]:
    """
    Fallback scanner: one `key: value` pair per line, no nesting.

    One leading and one trailing quote character are stripped from values.

    Example:
        >>> lines_scan('title: "Hello"\\ntags: a, b')
        {'title': 'Hello', 'tags': 'a, b'}
    """
    data: Dict[str, str] = {}
    for line in block.split('\n'):
        colon = line.find(':')
        if colon <= 0:
            continue
        key = line[:colon].strip()
        value = line[colon + 1:].strip()
        value = re.sub(r'^["\']|["\']$', '', value)
        data[key] = value
    return data


def tags_fromFrontmatter(value: Any) -> List[str]:
    """
    Normalize a frontmatter `tags` value to a list of tag names.

    Lists are stringified element-wise with empty entries dropped; strings
    are split on commas and whitespace runs.
    """
    if isinstance(value, (list, tuple)):
        tags = [item if isinstance(item, str) else str(item) for item in value]
        return [tag for tag in tags if tag.strip() != '']
    if isinstance(value, str):
        return [tag.strip() for tag in TAG_SPLIT_PATTERN.split(value) if tag.strip()]
    return []


def value_wrap(text: str, width: int = WRAP_WIDTH) -> List[str]:
    """Greedy word wrap; a single over-long word gets a line of its own"""
    lines: List[str] = []
    current = ''
    for word in text.split(' '):
        if len(current) + len(word) + 1 > width:
            if current:
                lines.append(current)
                current = word
            else:
                lines.append(word)
        else:
            current += (' ' if current else '') + word
    if current:
        lines.append(current)
    return lines


def value_format(value: Any) -> str:
    """
    Format one frontmatter value for the display block.

    A result starting with a newline is a block (bullet list or wrapped
    text) and is placed directly after the label.
    """
    if isinstance(value, (list, tuple)):
        if len(value) > LIST_INLINE_MAX:
            return '\n\n' + '\n'.join(f"- {item}" for item in value) + '\n'
        return ', '.join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(frontmatter_normalize(value), ensure_ascii=False)
    if isinstance(value, bool):
        text = 'true' if value else 'false'
    else:
        text = str(value)
    if len(text) > COMMA_LIST_MIN_LENGTH and ',' in text:
        items = [item.strip() for item in text.split(',')]
        return '\n\n' + '\n'.join(f"- {item}" for item in items) + '\n'
    if len(text) > WRAP_MIN_LENGTH:
        return '\n\n' + '  \n'.join(value_wrap(text)) + '\n'
    return text


def frontmatter_display(frontmatter: Optional[Dict[str, Any]]) -> str:
    """
    Render frontmatter as a readable markdown block.

    Keys are capitalised with underscores turned into spaces; empty values
    are skipped.

    Example:
        >>> frontmatter_display({'due_date': '2024-05-01'})
        '**Document Information**\\n\\n\\n\\n**Due date:**\\n2024-05-01'
    """
    if not frontmatter:
        return ''

    lines: List[str] = [DISPLAY_HEADER, '']
    for key, value in frontmatter.items():
        if value is None or value == '':
            continue
        key = str(key)
        label = key[:1].upper() + key[1:].replace('_', ' ')
        formatted = value_format(value)
        if formatted.startswith('\n'):
            lines.append(f"**{label}:**{formatted}")
        else:
            lines.append(f"**{label}:**\n{formatted}")
    return '\n\n'.join(lines)


class FrontmatterProcessor:
    """
    Extracts, merges and re-emits the leading frontmatter block.

    Attributes:
        note_title: Override title; wins over any frontmatter title
        preserve: Keep the frontmatter block in the output
        display: Insert the "Document Information" block
    """

    def __init__(self, options: Optional[PreprocessorOptions] = None):
        options = options or PreprocessorOptions.from_settings()
        self.note_title: Optional[str] = options.note_title or None
        self.preserve: bool = options.preserve_frontmatter
        self.display: bool = options.print_frontmatter

    def frontmatter_process(self, content: str, result: PreprocessingResult) -> str:
        """
        Run the frontmatter pass.

        Args:
            content: Raw note text
            result: Result receiving tags, title, frontmatter and warnings

        Returns:
            Content with the frontmatter kept, rewritten, stripped or
            synthesized according to the options
        """
        match = FRONTMATTER_PATTERN.match(content)
        if not match:
            LOG("No frontmatter block found", level=3)
            self.titleOverride_apply(result)
            return self.titleBlock_prepend(content)

        block, body = match.group(1), content[match.end():]
        try:
            data = yaml_parse(block)
        except FrontmatterError as e:
            result.warnings.append(f"Failed to parse frontmatter with YAML parser: {e}")
            LOG("Frontmatter YAML invalid, using line scanner", level=2)
            return self.fallback_process(block, body, result)

        if not data:
            # Nothing to merge; the block itself is kept, stripped or replaced
            self.titleOverride_apply(result)
            if self.note_title:
                return self.titleBlock_prepend(body)
            return content if self.preserve else body

        self.metadata_merge(data, result)
        final = dict(data)
        if self.note_title:
            final['title'] = self.note_title
        result.metadata.frontmatter = final
        LOG(f"Frontmatter parsed: {len(final)} keys", level=2)

        if self.preserve:
            head = f"---\n{yaml_dump(final)}---\n"
        elif self.note_title:
            head = f"---\n{yaml_dump({'title': self.note_title})}---\n"
        else:
            head = ''
        return self.display_insert(head, body, final)

    def fallback_process(self, block: str, body: str, result: PreprocessingResult) -> str:
        """Frontmatter pass over the line scanner's flat mapping"""
        data: Dict[str, Any] = lines_scan(block)
        self.metadata_merge(data, result)
        if self.note_title:
            data['title'] = self.note_title
        result.metadata.frontmatter = data

        if self.preserve:
            if self.note_title:
                head = f"---\n{yaml_dump(data)}---\n"
            else:
                # Keep the author's block byte for byte
                head = f"---\n{block}\n---\n"
        elif self.note_title:
            head = f"---\n{yaml_dump({'title': self.note_title})}---\n"
        else:
            head = ''
        return self.display_insert(head, body, data)

    def metadata_merge(self, data: Dict[str, Any], result: PreprocessingResult) -> None:
        """Merge frontmatter tags and title into the result metadata"""
        for tag in tags_fromFrontmatter(data.get('tags')):
            result.metadata.tag_add(tag)

        if self.note_title:
            result.metadata.title = self.note_title
        elif isinstance(data.get('title'), str) and data['title'].strip():
            result.metadata.title = data['title'].strip()

    def display_insert(self, head: str, body: str, data: Dict[str, Any]) -> str:
        """Join head and body, placing the display block between them"""
        if not self.display:
            return head + body
        display = frontmatter_display(data)
        if not display:
            return head + body
        if head:
            return f"{head}\n{display}\n\n{body}"
        return f"{display}\n\n{body}"

    def titleOverride_apply(self, result: PreprocessingResult) -> None:
        """Record the override title when there is no frontmatter to merge"""
        if self.note_title:
            result.metadata.title = self.note_title
            result.metadata.frontmatter = {'title': self.note_title}

    def titleBlock_prepend(self, content: str) -> str:
        """Synthesize a one-entry frontmatter block for the title override"""
        if not self.note_title:
            return content
        return f"---\n{yaml_dump({'title': self.note_title})}---\n{content}"


def frontmatter_strip(content: str) -> str:
    """Content without its leading frontmatter block, if any"""
    match = FRONTMATTER_PATTERN.match(content)
    return content[match.end():] if match else content
