"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from pathlib import Path
from argparse import Namespace
from functools import reduce
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the export pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the export progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity and the CLI options
        - env_check: templateManager, templateSource, envOK
        - notes_discover: noteFiles
        - notes_preprocess: processedNotes
        - template_render: renderResults
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the markdown notes
        outputdir: Directory receiving .md/.json/.typ outputs
        verbosity: Logging verbosity level (1-3)
        pattern: Glob (relative to inputdir) selecting the notes
        template: Template name to render each note with, if any
        templateDir: Directory of user templates (overrides settings)
        noFrontmatter: Strip frontmatter from the normalized output
        linkFormat: "md" or "none"; wikilink extension handling
        baseUrl: Prefix for relative wikilink targets
        noteTitleFromFile: Use the note's file stem as its title
        showTemplate: Print the highlighted template source and continue
        envOK: Environment validation passed
        templateManager: TemplateManager used to render, when --template is set
        templateSource: Raw text of the selected template
        noteFiles: Notes found by notes_discover
        processedNotes: One dict per note (path, result, output file)
        renderResults: Per-note template outcome keyed by note stem
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    pattern: str = field(default="**/*.md")
    template: Optional[str] = field(default=None)
    templateDir: Optional[str] = field(default=None)
    noFrontmatter: bool = field(default=False)
    linkFormat: Optional[str] = field(default=None)
    baseUrl: Optional[str] = field(default=None)
    noteTitleFromFile: bool = field(default=False)
    showTemplate: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    templateSource: Optional[str] = field(default=None)
    noteFiles: List[Path] = field(default_factory=list)
    processedNotes: List[Dict[str, Any]] = field(default_factory=list)
    templateManager: Optional[Any] = field(default=None)
    renderResults: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the export pipeline.

        Args:
            options: Parsed CLI arguments (pattern, template, etc.)
            inputdir: Directory containing the notes
            outputdir: Directory for export output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        # Only keep the options ProgramState knows about
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            notes_discover,
            notes_preprocess,
            template_render,
            results_report
        )

    This is equivalent to:
        results_report(template_render(notes_preprocess(notes_discover(env_check(initial_state)))))

    But reads left-to-right instead of inside-out.
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
