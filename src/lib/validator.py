"""
Template validation.

A set of independent checks over template text, each appending to one
TemplateValidationResult. Errors block rendering; warnings are advisory.

Checks:
    - bracket balance per kind ({}, [], ()) with line/column positions
    - quote parity and content-block balance outside strings
    - #function( calls against a known-function allowlist
    - variable name legality
    - $body$ present, common #set rules present
    - problematic patterns, single-use variables, likely typos
    - context: required variables supplied, optional ones defaulted
    - version-specific features, paper sizes, page/text setup
"""

import re
from typing import List, Optional

from ..models.template import SubstitutionContext, TemplateValidationResult
from .log import LOG
from .substitution import IMPLICIT_DEFAULTS, REQUIRED_VARIABLES, VARIABLE_PATTERN, variables_extract


BRACKET_KINDS = (
    ('{', '}', 'curly braces'),
    ('[', ']', 'square brackets'),
    ('(', ')', 'parentheses'),
)

KNOWN_FUNCTIONS = frozenset([
    'set', 'show', 'let', 'if', 'for', 'while', 'import', 'include',
    'text', 'page', 'par', 'heading', 'align', 'block', 'box', 'grid',
    'table', 'image', 'link', 'counter', 'context', 'place', 'lorem',
    'v', 'h', 'linebreak', 'pagebreak', 'smallcaps', 'emph', 'strong',
])

PAPER_SIZES = [
    'a3', 'a4', 'a5', 'a6', 'eu-business-card',
    'us-letter', 'us-legal', 'us-business-card',
]

COMMON_SETUP = ('#set page', '#set text', '#set par')

TYPO_MAP = {
    'titel': 'title',
    'autor': 'author',
    'authur': 'author',
    'dat': 'date',
    'boby': 'body',
    'bdy': 'body',
    'fontsize': 'fontSize',
    'font_size': 'fontSize',
    'pagesize': 'pageSize',
    'page_size': 'pageSize',
    'margin': 'margins',
}

PROBLEMATIC_PATTERNS = (
    (re.compile(r'#set\s+page\s*\([^)]*height:\s*auto[^)]*\)'),
     "Templates with 'height: auto' may not work well with multi-page documents"),
    (re.compile(r'#pagebreak\(\s*weak:\s*false\s*\)'),
     "Hard page breaks may cause layout issues in generated documents"),
    (re.compile(r'#import\s+[^:]*:'),
     "Import statements may fail if the imported module is not available"),
    (re.compile(r'\$\w+\$\s*\$\w+\$'),
     "Adjacent variables without spacing may cause formatting issues"),
)

VERSION_FEATURES = (
    (re.compile(r'height:\s*auto'), 'height: auto (Typst 0.11+)'),
    (re.compile(r'#context'), 'context blocks (Typst 0.11+)'),
    (re.compile(r'scope:\s*"parent"'), 'scope: "parent" (Typst 0.11+)'),
)

FUNCTION_PATTERN = re.compile(r'#(\w+)\s*\(')
INVALID_VARIABLE_PATTERN = re.compile(r'\$(\w*[^\w\s$]\w*|\d+\w*)\$')
LEGAL_NAME_PATTERN = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')
PAPER_PATTERN = re.compile(r'paper:\s*"([^"]+)"')
FONT_TUPLE_PATTERN = re.compile(r'font:\s*\([^)]*\)')
MARGIN_PATTERN = re.compile(r'margin:\s*[^,)]+')


def line_at(text: str, index: int) -> int:
    """1-based line number of a character offset"""
    return text.count('\n', 0, index) + 1


class TemplateValidator:
    """
    Runs every template check and aggregates the findings.

    Example:
        >>> result = TemplateValidator().template_validate('#set page(margin: (x: 1cm)\\n$body$')
        >>> result.errors
        ['Unclosed parentheses starting at line 1']
    """

    def template_validate(
        self, text: str, context: Optional[SubstitutionContext] = None
    ) -> TemplateValidationResult:
        """
        Validate template text, optionally against a substitution context.

        Args:
            text: Template text
            context: Values the template will be rendered with

        Returns:
            TemplateValidationResult; is_valid is True when no errors
        """
        result = TemplateValidationResult(variables=variables_extract(text))

        self.brackets_check(text, result)
        self.functions_check(text, result)
        self.variableNames_check(text, result)
        self.strings_check(text, result)
        self.structure_check(text, result)
        self.variables_check(text, result, context)
        self.features_check(text, result)
        self.pageSetup_check(text, result)

        LOG(
            f"Template validated: {len(result.errors)} errors, "
            f"{len(result.warnings)} warnings",
            level=2,
        )
        return result

    def brackets_check(self, text: str, result: TemplateValidationResult) -> None:
        """One stack per bracket kind; closers without opener fail at once"""
        stacks: List[List[int]] = [[] for _ in BRACKET_KINDS]

        for line_no, line in enumerate(text.split('\n'), start=1):
            for column, char in enumerate(line, start=1):
                for stack, (opener, closer, name) in zip(stacks, BRACKET_KINDS):
                    if char == opener:
                        stack.append(line_no)
                    elif char == closer:
                        if stack:
                            stack.pop()
                        else:
                            result.errors.append(
                                f"Unmatched closing {name} at line {line_no}, column {column}"
                            )

        for stack, (_, _, name) in zip(stacks, BRACKET_KINDS):
            for line_no in stack:
                result.errors.append(f"Unclosed {name} starting at line {line_no}")

    def functions_check(self, text: str, result: TemplateValidationResult) -> None:
        for match in FUNCTION_PATTERN.finditer(text):
            name = match.group(1)
            if name not in KNOWN_FUNCTIONS:
                result.warnings.append(
                    f"Unknown function '{name}' at line {line_at(text, match.start())}. "
                    "This may be a custom function or newer Typst feature."
                )

    def variableNames_check(self, text: str, result: TemplateValidationResult) -> None:
        for match in INVALID_VARIABLE_PATTERN.finditer(text):
            name = match.group(1)
            if not LEGAL_NAME_PATTERN.match(name):
                result.errors.append(
                    f"Invalid variable name '{name}' at line {line_at(text, match.start())}. "
                    "Variable names must start with a letter or underscore and contain only "
                    "letters, numbers, and underscores."
                )

    def strings_check(self, text: str, result: TemplateValidationResult) -> None:
        """
        Quote parity, then content-block balance.

        The second scan toggles an in-string flag on unescaped quotes and
        only counts square brackets outside strings.
        """
        if text.count('"') % 2 != 0:
            result.errors.append('Unclosed string literal detected')

        depth = 0
        in_string = False
        escaped = False
        for char in text:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = not in_string
            elif not in_string:
                if char == '[':
                    depth += 1
                elif char == ']':
                    depth -= 1

        if depth != 0:
            state = 'unclosed' if depth > 0 else 'extra closing'
            result.errors.append(f"Unbalanced content blocks: {abs(depth)} {state} bracket(s)")

    def structure_check(self, text: str, result: TemplateValidationResult) -> None:
        if '$body$' not in text:
            result.errors.append(
                "Template must contain a '$body$' variable to include the main content"
            )

        missing = [element for element in COMMON_SETUP if element not in text]
        if missing:
            result.warnings.append(
                f"Template may be missing common setup: {', '.join(missing)}. "
                "This is not an error but may result in default formatting."
            )

        for pattern, message in PROBLEMATIC_PATTERNS:
            if pattern.search(text):
                result.warnings.append(message)

    def variables_check(
        self,
        text: str,
        result: TemplateValidationResult,
        context: Optional[SubstitutionContext],
    ) -> None:
        if not result.variables:
            result.warnings.append(
                'Template contains no variables. This may be intentional for static templates.'
            )

        counts = {}
        for match in VARIABLE_PATTERN.finditer(text):
            counts[match.group(1)] = counts.get(match.group(1), 0) + 1
        for name, count in counts.items():
            if count == 1 and name not in REQUIRED_VARIABLES:
                result.warnings.append(
                    f"Variable '{name}' is used only once. Verify this is intentional."
                )

        if context is not None:
            self.context_check(result, context)

        for name in result.variables:
            if name in TYPO_MAP:
                result.warnings.append(
                    f"Variable '{name}' might be a typo. Did you mean '{TYPO_MAP[name]}'?"
                )

    def context_check(self, result: TemplateValidationResult, context: SubstitutionContext) -> None:
        """Required variables must be supplied; optional ones need a default"""
        for name in result.variables:
            if context.get(name):
                continue
            if name in REQUIRED_VARIABLES:
                result.errors.append(f"Required variable '{name}' is missing from context")
            elif name not in IMPLICIT_DEFAULTS:
                result.warnings.append(
                    f"Optional variable '{name}' is not provided and has no default value"
                )

    def features_check(self, text: str, result: TemplateValidationResult) -> None:
        for pattern, feature in VERSION_FEATURES:
            if pattern.search(text):
                result.warnings.append(
                    f"Template uses {feature}. Ensure Typst version 0.11+ is available."
                )

        if 'height: auto' in text and 'columns:' in text:
            result.warnings.append(
                'Using both "height: auto" and columns may cause unexpected layout behavior'
            )

        for match in PAPER_PATTERN.finditer(text):
            if match.group(1) not in PAPER_SIZES:
                result.warnings.append(
                    f"Unknown paper size '{match.group(1)}'. Valid sizes: {', '.join(PAPER_SIZES)}"
                )

        if FONT_TUPLE_PATTERN.search(text):
            result.warnings.append(
                'Using tuple syntax for fonts. Consider using string syntax for better compatibility.'
            )

        if 'lang:' not in text and 'language:' not in text:
            result.warnings.append(
                'Template does not specify language. Consider adding "lang: \\"en\\"" '
                'or appropriate language code.'
            )

    def pageSetup_check(self, text: str, result: TemplateValidationResult) -> None:
        if '#set page' in text and not MARGIN_PATTERN.search(text):
            result.warnings.append(
                'Page setup found but no margins specified. '
                'Consider setting margins for better layout control.'
            )

        if ('header:' in text or 'footer:' in text) and 'numbering:' not in text:
            result.warnings.append(
                'Template has header/footer but no page numbering. '
                'Consider adding numbering for better navigation.'
            )


def quick_validate(text: str) -> bool:
    """
    Cheap usability check: non-empty, has $body$, braces and brackets
    balanced by count.
    """
    if not text.strip() or '$body$' not in text:
        return False
    return text.count('{') == text.count('}') and text.count('[') == text.count(']')


def summary_format(result: TemplateValidationResult) -> str:
    """
    Human-readable report of a validation result.

    Example:
        >>> print(summary_format(TemplateValidationResult(variables=['body'])))
        Template validation passed
        Found 1 variables: body
        <BLANKLINE>
    """
    summary = f"Template validation {'passed' if result.is_valid else 'failed'}\n"
    summary += f"Found {len(result.variables)} variables: {', '.join(result.variables)}\n"
    if result.errors:
        summary += f"\nErrors ({len(result.errors)}):\n" + '\n'.join(f"• {e}" for e in result.errors)
    if result.warnings:
        summary += f"\nWarnings ({len(result.warnings)}):\n" + '\n'.join(f"• {w}" for w in result.warnings)
    return summary
