"""
Models package for mdtypst

Contains data structures and type definitions for preprocessing,
templating and the CLI pipeline.
"""

from .state import ProgramState, pipeline
from .preprocess import EmbedDescriptor, DocumentMetadata, PreprocessingResult
from .callouts import (
    FoldState,
    CalloutStyle,
    CalloutBlock,
    CALLOUT_STYLES,
    calloutStyle_get,
    FileKind,
    fileKind_classify,
)
from .template import (
    SubstitutionContext,
    TemplateVariable,
    TemplateMetadata,
    Template,
    TemplateValidationResult,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "EmbedDescriptor",
    "DocumentMetadata",
    "PreprocessingResult",
    "FoldState",
    "CalloutStyle",
    "CalloutBlock",
    "CALLOUT_STYLES",
    "calloutStyle_get",
    "FileKind",
    "fileKind_classify",
    "SubstitutionContext",
    "TemplateVariable",
    "TemplateMetadata",
    "Template",
    "TemplateValidationResult",
]
