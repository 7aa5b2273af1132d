"""
Callout conversion.

A callout is a blockquote introduced by a `[!type]` tag:

    > [!warning]- Careful
    > first paragraph
    >
    > second paragraph

It becomes a styled blockquote preceded by a class comment:

    <!-- callout-warning -->
    > **⚠️ Careful** 🔼
    >
    > Careful
    > first paragraph
    >
    > second paragraph

The scanner works line by line with two states. A blank line inside a
callout only continues it when the line after it is again a `>` line;
otherwise the callout ends and the blank line is scanned as ordinary text.
"""

import re
from enum import Enum
from typing import List, Optional

from ..models.callouts import CalloutBlock, FoldState, calloutStyle_get
from ..models.preprocess import PreprocessingResult
from .log import LOG


CALLOUT_HEADER_PATTERN = re.compile(r'^>\s*\[!([\w-]+)\]([+-]?)\s*(.*)$')


class ScanState(Enum):
    SCANNING = "scanning"
    IN_CALLOUT = "in_callout"


def line_isQuoted(line: Optional[str]) -> bool:
    return line is not None and line.startswith('>')


def line_next(lines: List[str], index: int) -> Optional[str]:
    """One-line lookahead: the line after `index`, or None at the end"""
    if index + 1 < len(lines):
        return lines[index + 1]
    return None


def block_render(block: CalloutBlock) -> str:
    """
    Render a finished callout.

    The returned text ends with a newline so that, once lines are joined,
    one blank separator line follows the callout.
    """
    style = calloutStyle_get(block.type)
    header = block.title or style.label
    glyph = block.fold_state.glyph

    out = [f"<!-- {style.style_class} -->"]
    out.append(f"> **{style.icon} {header}**" + (f" {glyph}" if glyph else ''))
    out.append('>')
    for line in block.body_lines:
        out.append(f"> {line}" if line.strip() else '>')
    out.append('')
    return '\n'.join(out)


class CalloutConverter:
    """Line scanner turning `> [!type]` blockquotes into styled blocks"""

    def callouts_convert(self, content: str, result: PreprocessingResult) -> str:
        """
        Convert every callout in `content`.

        Args:
            content: Markdown text
            result: Processing result (callouts never add warnings)

        Returns:
            Text with callouts rendered
        """
        lines = content.split('\n')
        output: List[str] = []
        state = ScanState.SCANNING
        block: Optional[CalloutBlock] = None
        count = 0
        i = 0

        while i < len(lines):
            line = lines[i]

            if state is ScanState.SCANNING:
                header = CALLOUT_HEADER_PATTERN.match(line)
                if header:
                    block = self.block_open(header)
                    state = ScanState.IN_CALLOUT
                else:
                    output.append(line)
                i += 1
                continue

            # IN_CALLOUT
            if line_isQuoted(line):
                block.body_lines.append(line[1:].strip())
                i += 1
            elif line.strip() == '' and line_isQuoted(line_next(lines, i)):
                block.body_lines.append('')
                i += 1
            else:
                # Terminating line is not consumed; rescan it as text
                output.append(block_render(block))
                count += 1
                block, state = None, ScanState.SCANNING

        if block is not None:
            output.append(block_render(block))
            count += 1

        LOG(f"Callouts converted: {count}", level=2)
        return '\n'.join(output)

    def block_open(self, header: 're.Match[str]') -> CalloutBlock:
        """Start a block from a header match; the title seeds the body"""
        callout_type, fold, title = header.group(1), header.group(2), header.group(3).strip()
        block = CalloutBlock(
            type=callout_type.lower(),
            fold_state=FoldState.from_marker(fold),
            title=title or None,
        )
        if title:
            block.body_lines.append(title)
        LOG(f"Callout [{block.type}] fold={block.fold_state.value}", level=3)
        return block
