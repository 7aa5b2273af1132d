"""
Template variable extraction and substitution.

Placeholders are written `$name$` with name matching `\\w+`. Substitution
replaces every occurrence of a variable with the same escaped value, taken
from the context or, when the context has nothing, from a small default
table. Substitution never fails: a missing `body` becomes an empty string
and it is up to validation to refuse the result.
"""

import re
from collections import Counter
from datetime import date
from typing import Dict, List, Optional, Tuple

from ..models.template import SubstitutionContext
from .log import LOG


VARIABLE_PATTERN = re.compile(r'\$(\w+)\$')

REQUIRED_VARIABLES = ('body',)

# Characters escaped in substituted values; backslash must come first
ESCAPE_TABLE = (
    ('\\', '\\\\'),
    ('"', '\\"'),
    ('$', '\\$'),
    ('#', '\\#'),
    ('[', '\\['),
    (']', '\\]'),
    ('{', '\\{'),
    ('}', '\\}'),
    ('<', '\\<'),
    ('>', '\\>'),
)


def defaults_get() -> Dict[str, str]:
    """Default values for the well-known variables; date is today's"""
    return {
        'title': '',
        'author': '',
        'date': date.today().isoformat(),
        'font': 'Liberation Serif',
        'fontSize': '12pt',
        'pageSize': 'a4',
        'margins': '2.5cm',
        'body': '',
    }


# Variables with a meaningful default (body's empty default does not count)
IMPLICIT_DEFAULTS = ('title', 'author', 'date', 'font', 'fontSize', 'pageSize', 'margins')


def variables_extract(text: str) -> List[str]:
    """
    Distinct variable names in first-seen order.

    Example:
        >>> variables_extract("$title$ by $author$: $title$")
        ['title', 'author']
    """
    names: List[str] = []
    for match in VARIABLE_PATTERN.finditer(text):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def value_escape(value: Optional[str]) -> str:
    """
    Escape a value for insertion into template markup.

    Example:
        >>> value_escape('A "quoted" #value')
        'A \\\\"quoted\\\\" \\\\#value'
    """
    if not value:
        return ''
    for char, escaped in ESCAPE_TABLE:
        value = value.replace(char, escaped)
    return value


def value_resolve(name: str, context: SubstitutionContext) -> str:
    """Context value, or the default when it is missing, None or empty"""
    value = context.get(name)
    if value is None or value == '':
        return defaults_get().get(name, '')
    return str(value)


def variables_substitute(text: str, context: SubstitutionContext) -> str:
    """
    Replace every `$name$` with its escaped value.

    Args:
        text: Template text
        context: Variable values

    Returns:
        Rendered text
    """
    for name in variables_extract(text):
        text = text.replace(f"${name}$", value_escape(value_resolve(name, context)))
    return text


def substitution_preview(
    text: str, context: SubstitutionContext
) -> Tuple[str, List[Tuple[str, str]]]:
    """
    Render the template and report the raw value used for each variable.

    Returns:
        (rendered text, [(variable, unescaped value), ...])
    """
    substitutions = [(name, value_resolve(name, context)) for name in variables_extract(text)]
    return variables_substitute(text, context), substitutions


def template_analyze(text: str) -> Dict[str, object]:
    """
    Variable usage statistics.

    Returns:
        Dict with total_variables, unique_variables, required_variables,
        optional_variables and variable_frequency

    Example:
        >>> template_analyze("$body$ $title$ $title$")['variable_frequency']
        {'body': 1, 'title': 2}
    """
    occurrences = [match.group(1) for match in VARIABLE_PATTERN.finditer(text)]
    unique = list(dict.fromkeys(occurrences))
    analysis = {
        'total_variables': len(occurrences),
        'unique_variables': unique,
        'required_variables': [name for name in REQUIRED_VARIABLES if name in unique],
        'optional_variables': [name for name in unique if name not in REQUIRED_VARIABLES],
        'variable_frequency': dict(Counter(occurrences)),
    }
    LOG(f"Template analysis: {len(occurrences)} placeholders, {len(unique)} distinct", level=3)
    return analysis
