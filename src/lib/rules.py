"""
Horizontal rule normalization.

A `---` line in the body can be read as a YAML delimiter by the markdown
converter downstream. Dash rules are rewritten to the same number of
asterisks, which is still a horizontal rule. A leading frontmatter block is
left untouched.
"""

import re

from .frontmatter import FRONTMATTER_PATTERN
from .log import LOG


DASH_RULE_PATTERN = re.compile(r'^(\s*)(---+)(\s*)$')


def rules_normalize(content: str) -> str:
    """
    Rewrite dash horizontal rules outside the frontmatter.

    Example:
        >>> rules_normalize("a\\n\\n----\\n\\nb")
        'a\\n\\n****\\n\\nb'
    """
    head = ''
    match = FRONTMATTER_PATTERN.match(content)
    if match:
        head, content = match.group(0), content[match.end():]

    lines = content.split('\n')
    count = 0
    for index, line in enumerate(lines):
        rule = DASH_RULE_PATTERN.match(line)
        if rule:
            lead, dashes, trail = rule.groups()
            lines[index] = f"{lead}{'*' * len(dashes)}{trail}"
            count += 1

    if count:
        LOG(f"Horizontal rules normalized: {count}", level=2)
    return head + '\n'.join(lines)
