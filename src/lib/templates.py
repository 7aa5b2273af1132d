"""
Template manager.

Knows the built-in templates shipped in the package `templates/` directory
and the user templates found in a custom directory, and drives extraction,
validation and substitution for them.

Built-in templates are registered once and never change. User templates
are re-read from disk on every discovery pass; nothing is cached beyond
that. Template files are read through a `reader` callable so the core can
be exercised without touching the file system.
"""

import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ..config.settings import appsettings
from ..models.template import (
    SubstitutionContext,
    Template,
    TemplateMetadata,
    TemplateValidationResult,
    TemplateVariable,
)
from .log import LOG
from .substitution import defaults_get, substitution_preview, template_analyze, variables_extract, variables_substitute
from .validator import TemplateValidator


TEMPLATE_SUFFIX = '.typ'

BUILTIN_TEMPLATES = {
    'default.typ': 'Basic document template with title, author, and date',
    'article.typ': 'Academic article template with proper formatting',
    'report.typ': 'Formal report template with title page and headers',
    'modern.typ': 'Modern template with accent colour and sans-serif headings',
}
BUILTIN_AUTHOR = 'mdtypst'
DEFAULT_COMPATIBILITY = ['0.11.0', '0.12.0']

VARIABLE_DESCRIPTIONS = {
    'title': 'Document title',
    'author': 'Document author',
    'date': 'Document date',
    'body': 'Main document content',
    'font': 'Font family',
    'fontSize': 'Font size',
    'pageSize': 'Page size (e.g., a4, us-letter)',
    'margins': 'Page margins',
}

NUMBER_NAME_PATTERN = re.compile(r'^(size|width|height|margin|count|number|page)', re.IGNORECASE)
BOOLEAN_NAME_PATTERN = re.compile(r'^(show|hide|enable|disable|is|has)', re.IGNORECASE)
META_LINE_PATTERN = re.compile(r'^\s*\*?\s*@(\w+):\s*(.+)$')

HEALTH_FEATURES = (
    ('height: auto', 'Dynamic page height'),
    ('#context', 'Context blocks'),
    ('scope: "parent"', 'Parent scope placement'),
)

SAMPLE_TEMPLATE = '''/*
@template-meta
@author: Your Name
@version: 1.0.0
@description: Sample custom template
@compatibility: 0.11.0, 0.12.0
*/

#set page(
  paper: "a4",
  margin: (x: 2.5cm, y: 2cm)
)
#set text(
  font: "$font$",
  size: 12pt,
  lang: "en"
)
#set par(justify: true)

#if "$title$" != "" [
  #align(center, text(16pt, weight: "bold")[$title$])
  #v(1em)
]

$body$
'''

Reader = Callable[[Path], str]


class TemplateError(Exception):
    """Raised when a requested template is missing or fails validation"""
    pass


def file_read(path: Path) -> str:
    return Path(path).read_text(encoding='utf-8')


def name_normalize(name: str) -> str:
    """Template name without the .typ suffix"""
    return name[:-len(TEMPLATE_SUFFIX)] if name.endswith(TEMPLATE_SUFFIX) else name


def variableType_infer(name: str) -> str:
    """
    Guess a variable's type from its name prefix.

    Example:
        >>> variableType_infer('showToc')
        'boolean'
    """
    if NUMBER_NAME_PATTERN.match(name):
        return 'number'
    if BOOLEAN_NAME_PATTERN.match(name):
        return 'boolean'
    return 'string'


def variableDefault_get(name: str) -> Any:
    kind = variableType_infer(name)
    if kind == 'boolean':
        return False
    if kind == 'number':
        if 'size' in name:
            return 12
        if 'margin' in name:
            return 2.5
        return 0
    return defaults_get().get(name, '')


def variable_isRequired(name: str, text: str) -> bool:
    """body always; otherwise unless the template guards it with an #if"""
    if name == 'body':
        return True
    guard = re.compile(r'#if.*\$' + re.escape(name) + r'\$.*!=.*""')
    return not guard.search(text)


def variables_describe(text: str) -> Dict[str, TemplateVariable]:
    return {
        name: TemplateVariable(
            type=variableType_infer(name),
            default_value=variableDefault_get(name),
            description=VARIABLE_DESCRIPTIONS.get(name, f"Template variable: {name}"),
            required=variable_isRequired(name, text),
        )
        for name in variables_extract(text)
    }


def metadata_parse(text: str, name: str) -> TemplateMetadata:
    """
    Read the `/* @template-meta ... */` comment at the top of a template.

    Recognized keys are author, version, description and compatibility
    (a comma list). Missing keys get defaults.
    """
    found: Dict[str, Any] = {}
    in_comment = False
    in_block = False

    for line in text.split('\n'):
        stripped = line.strip()
        if stripped.startswith('/*'):
            in_comment = True
        # The marker may share the opening line or follow it
        if in_comment and not in_block and '@template-meta' in stripped:
            in_block = True
            continue
        if '*/' in stripped:
            in_comment = in_block = False
            continue
        if not in_block:
            continue
        meta = META_LINE_PATTERN.match(stripped)
        if not meta:
            continue
        key, value = meta.group(1), meta.group(2).strip()
        if key == 'compatibility':
            found[key] = [version.strip() for version in value.split(',')]
        elif key in ('author', 'version', 'description'):
            found[key] = value

    return TemplateMetadata(
        author=found.get('author') or 'Custom',
        version=found.get('version') or '1.0.0',
        description=found.get('description') or f"Custom template: {name}",
        compatibility=found.get('compatibility') or list(DEFAULT_COMPATIBILITY),
    )


def notFound_result(name: str) -> TemplateValidationResult:
    return TemplateValidationResult(errors=[f"Template '{name}' not found"])


class TemplateManager:
    """
    Resolves template names to content and runs template operations.

    Args:
        builtin_dir: Directory holding the built-in .typ files
        custom_dir: Directory scanned for user templates
        reader: Callable reading a template file; may raise
                FileNotFoundError or PermissionError
        discover: Scan custom_dir immediately

    Example:
        >>> manager = TemplateManager(custom_dir='vault/Typst Templates')
        >>> manager.template_has('article')
        True
    """

    def __init__(
        self,
        builtin_dir: Optional[Union[str, Path]] = None,
        custom_dir: Optional[Union[str, Path]] = None,
        reader: Optional[Reader] = None,
        discover: bool = True,
    ):
        self.builtin_dir = Path(builtin_dir or appsettings.builtin_template_dir)
        self.custom_dir = Path(custom_dir or appsettings.custom_template_dir).expanduser()
        self.reader: Reader = reader or file_read
        self.validator = TemplateValidator()

        self.builtin_templates: Dict[str, Template] = {
            name_normalize(file_name): Template(
                name=name_normalize(file_name),
                builtin_id=file_name,
                metadata=TemplateMetadata(
                    author=BUILTIN_AUTHOR,
                    description=description,
                    compatibility=list(DEFAULT_COMPATIBILITY),
                ),
            )
            for file_name, description in BUILTIN_TEMPLATES.items()
        }
        self.custom_templates: Dict[str, Template] = {}

        if discover:
            self.templates_discover()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def template_get(self, name: str) -> Optional[Template]:
        """Built-ins shadow user templates of the same name"""
        key = name_normalize(name)
        return self.builtin_templates.get(key) or self.custom_templates.get(key)

    def templatePath_get(self, name: str) -> Optional[Path]:
        template = self.template_get(name)
        if template is None:
            return None
        if template.is_builtin:
            return self.builtin_dir / template.builtin_id
        return template.file_path

    def template_has(self, name: str) -> bool:
        """True for a user template, or a built-in whose file is present"""
        template = self.template_get(name)
        if template is None:
            return False
        if template.is_builtin:
            return self.templatePath_get(name).is_file()
        return True

    def templates_list(self) -> List[str]:
        """Available template file names, built-ins first"""
        builtin = [
            template.builtin_id
            for template in self.builtin_templates.values()
            if (self.builtin_dir / template.builtin_id).is_file()
        ]
        custom = [f"{name}{TEMPLATE_SUFFIX}" for name in self.custom_templates]
        LOG(f"Templates available: {len(builtin)} built-in, {len(custom)} custom", level=2)
        return builtin + custom

    def templateContent_get(self, name: str) -> Optional[str]:
        """
        Read a template's text.

        Returns:
            The content, or None when the template is unknown or unreadable
        """
        path = self.templatePath_get(name)
        if path is None:
            LOG(f"Template '{name}' is not registered", level=2)
            return None
        try:
            return self.reader(path)
        except (FileNotFoundError, PermissionError) as e:
            LOG(f"Error reading template {path}: {e}", level=1)
            return None

    def templateInfo_get(self, name: str) -> Optional[Template]:
        """Template description with variables filled in from its content"""
        template = self.template_get(name)
        if template is None:
            return None
        content = self.templateContent_get(name)
        if content is None:
            return None
        if template.is_builtin:
            return Template(
                name=template.name,
                builtin_id=template.builtin_id,
                variables=variables_describe(content),
                metadata=template.metadata,
            )
        return template

    # ------------------------------------------------------------------
    # User templates
    # ------------------------------------------------------------------

    def templates_discover(self) -> None:
        """
        Re-scan the custom directory for *.typ files.

        A missing directory is created with a sample template in it.
        """
        self.custom_templates.clear()

        if not self.custom_dir.is_dir():
            try:
                self.custom_dir.mkdir(parents=True, exist_ok=True)
                (self.custom_dir / f"sample{TEMPLATE_SUFFIX}").write_text(
                    SAMPLE_TEMPLATE, encoding='utf-8'
                )
                LOG(f"Created template directory at: {self.custom_dir}", level=1)
            except OSError as e:
                LOG(f"Error creating template directory {self.custom_dir}: {e}", level=1)
                return

        for path in sorted(self.custom_dir.glob(f"*{TEMPLATE_SUFFIX}")):
            if path.is_file():
                self.customTemplate_load(path)
        LOG(f"Custom templates discovered: {len(self.custom_templates)}", level=2)

    def customTemplate_load(self, path: Path) -> None:
        try:
            content = self.reader(path)
        except (FileNotFoundError, PermissionError) as e:
            LOG(f"Error loading custom template {path}: {e}", level=1)
            return
        name = path.stem
        self.custom_templates[name] = Template(
            name=name,
            file_path=path,
            variables=variables_describe(content),
            metadata=metadata_parse(content, name),
        )
        LOG(f"Custom template loaded: {name}", level=3)

    def customTemplateDir_set(self, directory: Union[str, Path]) -> None:
        self.custom_dir = Path(directory).expanduser()
        self.templates_discover()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def template_validate(
        self, name: str, context: Optional[SubstitutionContext] = None
    ) -> TemplateValidationResult:
        content = self.templateContent_get(name)
        if content is None:
            return notFound_result(name)
        return self.validator.template_validate(content, context)

    def templates_validateAll(self) -> Dict[str, Any]:
        """
        Validate every built-in and user template.

        Returns:
            Dict with builtin_results, custom_results (name -> result) and a
            summary of total/valid/invalid/with-warnings counts
        """
        builtin_results: Dict[str, TemplateValidationResult] = {}
        custom_results: Dict[str, TemplateValidationResult] = {}

        for template in self.builtin_templates.values():
            content = self.templateContent_get(template.name)
            if content is None:
                builtin_results[template.builtin_id] = TemplateValidationResult(
                    errors=[f"Error loading template: {template.builtin_id}"]
                )
            else:
                builtin_results[template.builtin_id] = self.validator.template_validate(content)

        for name in self.custom_templates:
            content = self.templateContent_get(name)
            if content is not None:
                custom_results[name] = self.validator.template_validate(content)

        results = list(builtin_results.values()) + list(custom_results.values())
        return {
            'builtin_results': builtin_results,
            'custom_results': custom_results,
            'summary': {
                'total_templates': len(results),
                'valid_templates': sum(1 for r in results if r.is_valid),
                'invalid_templates': sum(1 for r in results if not r.is_valid),
                'templates_with_warnings': sum(1 for r in results if r.warnings),
            },
        }

    def template_process(self, name: str, context: SubstitutionContext) -> Dict[str, Any]:
        """
        Validate against `context` and render.

        Returns:
            Dict with content (rendered text) and validation

        Raises:
            TemplateError: Template missing, or validation produced errors
        """
        content = self.templateContent_get(name)
        if content is None:
            raise TemplateError(f"Template '{name}' not found")

        validation = self.validator.template_validate(content, context)
        if not validation.is_valid:
            raise TemplateError(f"Template validation failed: {', '.join(validation.errors)}")

        LOG(f"Rendering template '{name}'", level=2)
        return {'content': variables_substitute(content, context), 'validation': validation}

    def template_preview(self, name: str, context: SubstitutionContext) -> Dict[str, Any]:
        """Like template_process, but never raises"""
        content = self.templateContent_get(name)
        if content is None:
            return {'content': '', 'validation': notFound_result(name), 'substitutions': []}

        validation = self.validator.template_validate(content, context)
        preview, substitutions = substitution_preview(content, context)
        return {'content': preview, 'validation': validation, 'substitutions': substitutions}

    def template_analyze(self, name: str) -> Dict[str, Any]:
        """
        Template info, variable statistics and a context-free validation.

        Raises:
            TemplateError: Template missing
        """
        content = self.templateContent_get(name)
        if content is None:
            raise TemplateError(f"Template '{name}' not found")
        return {
            'info': self.templateInfo_get(name),
            'analysis': template_analyze(content),
            'validation': self.validator.template_validate(content),
        }

    def template_checkHealth(self, name: str) -> Dict[str, Any]:
        """
        Issues, recommendations and compatibility notes for one template.

        A template is healthy when it validates without errors or warnings.
        """
        content = self.templateContent_get(name)
        if content is None:
            return {
                'is_healthy': False,
                'issues': [f"Template '{name}' not found"],
                'recommendations': [],
                'compatibility': {'typst_version': [], 'features': []},
            }

        validation = self.validator.template_validate(content)
        recommendations: List[str] = []
        if '#set page' not in content:
            recommendations.append(
                'Consider adding page setup (#set page) for better layout control'
            )
        if '#set text' not in content:
            recommendations.append(
                'Consider adding text configuration (#set text) for consistent typography'
            )
        if validation.variables == ['body']:
            recommendations.append(
                'Template only uses body variable. Consider adding title, author, '
                'or date variables for more flexibility'
            )

        return {
            'is_healthy': validation.is_valid and not validation.warnings,
            'issues': validation.errors + validation.warnings,
            'recommendations': recommendations,
            'compatibility': {
                'typst_version': list(DEFAULT_COMPATIBILITY),
                'features': [feature for marker, feature in HEALTH_FEATURES if marker in content],
            },
        }
