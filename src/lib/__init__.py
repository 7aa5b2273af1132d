"""
mdtypst - Note-dialect markdown to typesetting-ready markdown

Preprocessing passes, template substitution/validation and the template
manager.
"""

__version__ = "1.0.0"

from .log import LOG, LOG_messages, state_connectToLogger
from .preprocessor import Preprocessor
from .frontmatter import FrontmatterProcessor, frontmatter_strip
from .metadata import tags_extract, wordCount_calculate, title_extract
from .emailblock import EmailBlockConverter
from .links import links_filter
from .embeds import EmbedResolver
from .wikilinks import WikilinkResolver, path_sanitize
from .callouts import CalloutConverter
from .rules import rules_normalize
from .substitution import (
    variables_extract,
    variables_substitute,
    value_escape,
    substitution_preview,
    template_analyze,
)
from .validator import TemplateValidator, quick_validate, summary_format
from .templates import TemplateManager, TemplateError

__all__ = [
    "__version__",
    "LOG",
    "LOG_messages",
    "state_connectToLogger",
    "Preprocessor",
    "FrontmatterProcessor",
    "frontmatter_strip",
    "tags_extract",
    "wordCount_calculate",
    "title_extract",
    "EmailBlockConverter",
    "links_filter",
    "EmbedResolver",
    "WikilinkResolver",
    "path_sanitize",
    "CalloutConverter",
    "rules_normalize",
    "variables_extract",
    "variables_substitute",
    "value_escape",
    "substitution_preview",
    "template_analyze",
    "TemplateValidator",
    "quick_validate",
    "summary_format",
    "TemplateManager",
    "TemplateError",
]
