"""
mdtypst - Note-dialect markdown to typesetting-ready markdown

Normalizes notes written with wikilinks, embeds, callouts, frontmatter and
email blocks, and renders them through validated typst templates.
"""

__version__ = "1.0.0"

from .lib import Preprocessor, TemplateManager, TemplateValidator, LOG, state_connectToLogger

__all__ = ["Preprocessor", "TemplateManager", "TemplateValidator", "LOG", "state_connectToLogger", "__version__"]
