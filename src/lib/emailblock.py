"""
Email block conversion.

A fenced block tagged `email` holds a small header (from/to/subject/date)
followed by `---` and a free-text body:

    ```email
    from: alice@example.org
    to: [bob@example.org, carol@example.org]
    subject: Quarterly numbers
    ---
    Hi Bob, ...
    ```

Each block becomes a raw typst snippet calling `#email-block(...)` with the
header fields as named string arguments and the body as the positional
string argument. The body keeps its real newlines so paragraphs survive.
"""

import re
from typing import Dict, Optional

from ..models.preprocess import PreprocessingResult
from .links import links_filter
from .log import LOG


EMAIL_BLOCK_PATTERN = re.compile(r'^```email\s*\n([\s\S]*?)^```\s*$', re.MULTILINE)
HEADER_SEPARATOR = '---'
EMAIL_FUNCTION = 'email-block'
HEADER_KEYS = ('from', 'to', 'subject', 'date')

# Body clean-up, applied in order
BODY_CLEANUPS = (
    (re.compile(r'[\u00A0\u1680\u2000-\u200B\u202F\u205F\u3000\uFEFF]'), ' '),
    (re.compile(r'[\u2028\u2029]'), '\n'),
    (re.compile(r'[\u2010-\u2015\u2212]'), '-'),
    (re.compile(r'[\u2020\u2021]'), ''),
    (re.compile(r'[\u2022\u2023\u2043]'), '\u2022 '),
    (re.compile(r'[\u200B-\u200D\uFEFF]'), ''),
    (re.compile(r'[\u00AD\u061C\u180E\u2066-\u2069]'), ''),
    (re.compile(r'[ \t]+'), ' '),
    (re.compile(r'\n{3,}'), '\n\n'),
)


class EmailBlockError(Exception):
    """Raised when an email block header cannot be parsed"""
    pass


def quotes_escape(text: Optional[str]) -> str:
    """
    Escape text for a single-line typst string argument.

    Example:
        >>> quotes_escape('Say "hi"\\n')
        'Say \\\\"hi\\\\"\\\\n'
    """
    if not text:
        return ''
    return (text
            .replace('\\', '\\\\')
            .replace('"', '\\"')
            .replace("'", "\\'")
            .replace('\n', '\\n')
            .replace('\r', '\\r'))


def body_escape(text: str) -> str:
    """
    Normalize unicode oddities and escape the body for a typst string.

    Newlines are kept as real newlines.
    """
    if not text:
        return ''
    for pattern, replacement in BODY_CLEANUPS:
        text = pattern.sub(replacement, text)
    return text.replace('\\', '\\\\').replace('"', '\\"').replace("'", "\\'")


def header_quote(header: str) -> str:
    """Quote wikilinks and {{template}} values so they are not split"""
    if '[[' in header and '"[[' not in header:
        header = header.replace('[[', '"[[').replace(']]', ']]"')
    if '{{' in header and '"{{' not in header:
        header = header.replace('{{', '"{{').replace('}}', '}}"')
    return header


def header_parse(header: str) -> Dict[str, str]:
    """
    Parse `key: value` header lines.

    Surrounding quotes are removed and `[a, b]` lists are flattened to
    `a, b`.

    Example:
        >>> header_parse('to: ["a@x.org", "b@x.org"]')
        {'to': 'a@x.org, b@x.org'}
    """
    params: Dict[str, str] = {}
    try:
        for line in header_quote(header).split('\n'):
            colon = line.find(':')
            if colon <= 0:
                continue
            key = line[:colon].strip()
            value = line[colon + 1:].strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
                value = value[1:-1]
            elif value.startswith('[') and value.endswith(']'):
                value = value[1:-1].replace('"', '').replace("'", '')
            params[key] = value
    except Exception as e:
        raise EmailBlockError(f"YAML parsing failed: {e}")
    return params


class EmailBlockConverter:
    """Rewrites ```email fenced blocks into #email-block(...) calls"""

    def __init__(self, function_name: str = EMAIL_FUNCTION):
        self.function_name = function_name

    def emailBlocks_convert(self, content: str, result: PreprocessingResult) -> str:
        """
        Convert every email block in `content`.

        A block that fails to convert is re-emitted as a plain fenced code
        block so nothing is dropped.
        """
        count = 0

        def block_replace(match: 're.Match[str]') -> str:
            nonlocal count
            block = match.group(1)
            try:
                converted = self.block_convert(block)
            except Exception as e:
                result.warnings.append(f"Error processing email block content: {e}")
                return f"```\n{block}\n```"
            count += 1
            return converted

        converted = EMAIL_BLOCK_PATTERN.sub(block_replace, content)
        if count:
            LOG(f"Email blocks converted: {count}", level=2)
        return converted

    def block_convert(self, block: str) -> str:
        """Convert the inside of one email block to a raw typst snippet"""
        parts = block.split(HEADER_SEPARATOR)
        header = parts[0].strip()
        body = HEADER_SEPARATOR.join(parts[1:]).strip() if len(parts) > 1 else ''
        body = links_filter(body).strip()

        params = header_parse(header)
        args = [
            f'{key}: "{quotes_escape(params[key])}"'
            for key in HEADER_KEYS
            if params.get(key)
        ]
        args.append(f'"{body_escape(body)}"')
        LOG(f"Email block: {', '.join(k for k in HEADER_KEYS if params.get(k)) or 'no header'}",
            level=3)
        return f"\n\n```{{=typst}}\n#{self.function_name}({', '.join(args)})\n```\n\n"
