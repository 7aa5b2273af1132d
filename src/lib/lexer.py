"""
Custom Pygments lexer for typesetting templates

Used by the CLI's --showTemplate option to print the selected template
with terminal highlighting.

Token types:
- Comment: // line comments and /* block */ comments (incl. @template-meta)
- Name.Variable: $name$ placeholders
- Keyword: #set, #show, #let, #if, #for, #while, #import, #include
- Name.Function: other #function calls
- String: "..." literals (placeholders inside are still highlighted)
- Number: lengths and numbers such as 12pt, 2.5cm, 1em
- Punctuation: brackets, braces, parentheses
"""

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Comment,
    Number,
    Operator,
)


class TemplateLexer(RegexLexer):
    """
    Lexer for $variable$ templates written in typst markup

    Example:
        #set text(font: "$font$", size: 12pt)

    Tokens:
        #set → Keyword
        text → Name.Function
        "$font$" → String / Name.Variable / String
        12pt → Number
    """

    name = 'Typst Template'
    aliases = ['typst-template', 'typ']
    filenames = ['*.typ']

    tokens = {
        'root': [
            # Comments
            (r'//[^\n]*', Comment.Single),
            (r'/\*', Comment.Multiline, 'comment'),

            # Placeholders
            (r'\$\w+\$', Name.Variable),

            # Statement keywords
            (r'(#)(set|show|let|if|else|for|while|import|include|context)\b',
             bygroups(Keyword, Keyword)),

            # Function calls and other code-mode identifiers
            (r'(#)([a-zA-Z_][\w.-]*)', bygroups(Punctuation, Name.Function)),

            # Strings
            (r'"', String, 'string'),

            # Lengths, ratios and plain numbers
            (r'\d+(\.\d+)?(pt|mm|cm|in|em|fr|%)?', Number),

            # Named arguments (key: value)
            (r'([a-zA-Z_][\w-]*)(\s*)(:)(?!/)', bygroups(Name.Attribute, Text, Punctuation)),

            (r'[\[\]{}()]', Punctuation),
            (r'(=>|!=|==|\+|-|/|\*)', Operator),

            (r'[^\s$#"/\[\]{}()\d]+', Text),
            (r'\s+', Text),
            (r'.', Text),
        ],

        'comment': [
            (r'\*/', Comment.Multiline, '#pop'),
            (r'@[\w-]+', Comment.Special),
            (r'[^*@]+', Comment.Multiline),
            (r'[*@]', Comment.Multiline),
        ],

        'string': [
            (r'\\.', String.Escape),
            (r'\$\w+\$', Name.Variable),
            (r'"', String, '#pop'),
            (r'[^"\\$]+', String),
            (r'\$', String),
        ],
    }


def get_lexer() -> TemplateLexer:
    """
    Get the TemplateLexer instance

    Returns:
        TemplateLexer instance ready for use with Pygments
    """
    return TemplateLexer()
