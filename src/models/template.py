"""
Template data models

Describes typesetting templates (built-in or user supplied), their
placeholder variables, and the aggregated result of validating one.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional


# Mapping from variable name to value; None or "" means "use the default"
SubstitutionContext = Mapping[str, Optional[str]]


@dataclass
class TemplateVariable:
    """
    One $name$ placeholder as described by the template manager

    Attributes:
        type: Inferred from the name: "string", "number" or "boolean"
        default_value: Value used when the context omits the variable
        description: Human readable purpose of the variable
        required: body is always required; others unless guarded by an #if
    """
    type: str = "string"
    default_value: Any = ""
    description: str = ""
    required: bool = True


@dataclass
class TemplateMetadata:
    """Author information read from a template's @template-meta comment"""
    author: str = "Custom"
    version: str = "1.0.0"
    description: str = ""
    compatibility: List[str] = field(default_factory=lambda: ["0.11.0", "0.12.0"])


@dataclass
class Template:
    """
    A template known to the TemplateManager

    Exactly one of builtin_id and file_path is set: built-in templates are
    shipped with the package and immutable, user templates live on disk and
    may change between discovery passes.

    Attributes:
        name: Template name without the .typ suffix
        builtin_id: Built-in file name (e.g., "article.typ")
        file_path: Location of a user template
        variables: Placeholder descriptions keyed by variable name
        metadata: Author/version/description/compatibility
    """
    name: str
    builtin_id: Optional[str] = None
    file_path: Optional[Path] = None
    variables: Dict[str, TemplateVariable] = field(default_factory=dict)
    metadata: TemplateMetadata = field(default_factory=TemplateMetadata)

    def __post_init__(self) -> None:
        if (self.builtin_id is None) == (self.file_path is None):
            raise ValueError(
                f"Template '{self.name}' needs exactly one of builtin_id or file_path"
            )

    @property
    def is_builtin(self) -> bool:
        return self.builtin_id is not None


@dataclass
class TemplateValidationResult:
    """
    Aggregated outcome of all template checks

    Validity is derived from the error list and cannot be set directly;
    warnings never affect it.

    Attributes:
        errors: Problems that must block rendering
        warnings: Advisory notices
        variables: Distinct variable names, first-seen order
    """
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    variables: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "variables": list(self.variables),
        }
