#!/usr/bin/env python3
"""
mdtypst - Note-dialect markdown to typesetting-ready markdown

Converts notes written in an extended markdown dialect (wikilinks, embeds,
callouts, frontmatter, email blocks, hashtags) into normalized markdown,
collects per-note metadata, and optionally renders each note through a
typst template.

As with other ChRIS-style tools, the app is built on the ChRIS "plugin"
pattern: positional inputdir/outputdir plus options, executed as a
functional pipeline of (ProgramState) -> ProgramState stages.

Outputs, per note (relative paths mirror the input tree):
    <stem>.md     normalized markdown (image/PDF embeds left as markers)
    <stem>.json   metadata, warnings and errors
    <stem>.typ    rendered template, only with --template

Usage:
    mdtypst inputdir/ outputdir/ [--pattern GLOB] [--template NAME]

Examples:
    # Normalize every note in a vault
    mdtypst vault/ out/

    # Only the meeting notes, titled after their file names
    mdtypst vault/ out/ --pattern "Meetings/*.md" --noteTitleFromFile

    # Render through the article template, links without extension
    mdtypst vault/ out/ --template article --linkFormat none -vv
"""

import json
import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from pygments import highlight
from pygments.formatters import TerminalFormatter

from .config import appsettings, PreprocessorOptions, WikilinkConfig
from .lib import (
    __version__,
    LOG,
    LOG_messages,
    state_connectToLogger,
    Preprocessor,
    TemplateManager,
    TemplateError,
    rules_normalize,
    frontmatter_strip,
    summary_format,
)
from .lib.lexer import get_lexer
from .models import ProgramState, pipeline


DISPLAY_TITLE = """
  mdtypst
  Note markdown to typesetting-ready markdown
"""

# Define CLI arguments
parser = ArgumentParser(
    description="mdtypst - normalize note-dialect markdown and render typst templates",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--pattern",
    default="**/*.md",
    type=str,
    help="Glob (relative to inputdir) selecting the notes to process",
)

parser.add_argument(
    "--template",
    default=None,
    type=str,
    help="Template to render each note with (e.g., default, article, report, modern)",
)

parser.add_argument(
    "--templateDir",
    default=None,
    type=str,
    help="Directory of user *.typ templates. Defaults to '<inputdir>/"
    f"{appsettings.custom_template_dir}'",
)

parser.add_argument(
    "--noFrontmatter",
    action="store_true",
    help="Strip the frontmatter block from the normalized output",
)

parser.add_argument(
    "--linkFormat",
    default=None,
    choices=["md", "none"],
    help="'md' appends .md to wikilink targets, 'none' leaves them bare "
    f"(default from settings: {appsettings.link_format})",
)

parser.add_argument(
    "--baseUrl",
    default=None,
    type=str,
    help="Prefix for relative wikilink targets",
)

parser.add_argument(
    "--noteTitleFromFile",
    action="store_true",
    help="Use each note's file name as its title",
)

parser.add_argument(
    "--showTemplate",
    action="store_true",
    help="Print the selected template with syntax highlighting",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate directories and load the requested template.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - templateManager: TemplateManager (only with --template)
            - templateSource: Template text (only with --template)
            - envOK: True if environment is valid

    Exits:
        1 if inputdir is missing, outputdir equals inputdir, or the
        template cannot be found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.outputdir.resolve() == state.inputdir.resolve():
        print("Error: outputdir must differ from inputdir", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    if state.template:
        template_dir = Path(state.templateDir) if state.templateDir \
            else state.inputdir / appsettings.custom_template_dir
        state.templateManager = TemplateManager(custom_dir=template_dir)

        if not state.templateManager.template_has(state.template):
            available = ", ".join(state.templateManager.templates_list())
            print(f"Error: Template '{state.template}' not found", file=sys.stderr)
            print(f"Available templates: {available}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)

        state.templateSource = state.templateManager.templateContent_get(state.template)
        if state.templateSource is None:
            print(f"Error: Template '{state.template}' could not be read", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        LOG(f"Template: {state.templateManager.templatePath_get(state.template)}", level=2)

        if state.showTemplate:
            print(highlight(state.templateSource, get_lexer(), TerminalFormatter()))

    state.envOK = True
    return state


def notes_discover(inputstate: ProgramState) -> ProgramState:
    """
    Find the notes to process.

    Args:
        inputstate: Program state with inputdir and pattern

    Returns:
        ProgramState with added field:
            - noteFiles: Sorted list of note paths

    Exits:
        1 if no note matches the pattern
    """

    state = inputstate.copy()

    state.noteFiles = sorted(p for p in state.inputdir.glob(state.pattern) if p.is_file())
    if not state.noteFiles:
        print(f"Error: No notes matching '{state.pattern}' in {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Found {len(state.noteFiles)} notes", level=1)
    return state


def note_outputPath(state: ProgramState, note: Path, suffix: str) -> Path:
    """Mirror the note's location under outputdir with a new suffix"""
    target = state.outputdir / note.relative_to(state.inputdir).with_suffix(suffix)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def notes_preprocess(inputstate: ProgramState) -> ProgramState:
    """
    Run the preprocessor over every note and write .md/.json outputs.

    Args:
        inputstate: Program state with noteFiles

    Returns:
        ProgramState with added field:
            - processedNotes: List of dicts with source, output, result

    Exits:
        1 if a note cannot be read or written
    """

    state = inputstate.copy()

    LOG("Preprocessing notes...", level=1)

    wikilink_config = WikilinkConfig.from_settings()
    if state.linkFormat:
        wikilink_config = WikilinkConfig(format=state.linkFormat, extension=wikilink_config.extension)

    processed = []
    for note in state.noteFiles:
        options = PreprocessorOptions.from_settings(
            preserve_frontmatter=False if state.noFrontmatter else None,
            base_url=state.baseUrl,
            note_title=note.stem if state.noteTitleFromFile else None,
        )
        preprocessor = Preprocessor(options, wikilink_config)

        try:
            raw = note.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading note {note}: {e}", file=sys.stderr)
            sys.exit(1)

        result = preprocessor.process(raw)
        if appsettings.normalize_rules:
            result.content = rules_normalize(result.content)

        LOG_messages("warning", result.warnings, source=note.name)
        LOG_messages("error", result.errors, source=note.name)

        output = note_outputPath(state, note, ".md")
        try:
            output.write_text(result.content, encoding="utf-8")
            note_outputPath(state, note, ".json").write_text(
                json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            print(f"Error writing output for {note}: {e}", file=sys.stderr)
            sys.exit(1)

        LOG(f"{note.name}: {result.metadata.word_count} words -> {output}", level=2)
        processed.append({"source": note, "output": output, "result": result})

    state.processedNotes = processed
    return state


def template_render(inputstate: ProgramState) -> ProgramState:
    """
    Render each processed note through the selected template.

    Notes whose template validation fails (or, in strict mode, warns) get
    no .typ output; the reason is kept in renderResults.

    Args:
        inputstate: Program state with processedNotes and templateManager

    Returns:
        ProgramState with added field:
            - renderResults: note name -> {status, output, errors, warnings}
    """

    state = inputstate.copy()

    if not state.template:
        return state

    LOG(f"Rendering notes with template '{state.template}'...", level=1)

    renders = {}
    for note in state.processedNotes:
        result = note["result"]
        frontmatter = result.metadata.frontmatter or {}
        context = {
            "title": result.metadata.title or note["source"].stem,
            "author": str(frontmatter.get("author") or ""),
            "date": str(frontmatter.get("date") or ""),
            "body": frontmatter_strip(result.content),
        }

        name = str(note["source"].relative_to(state.inputdir))
        try:
            rendered = state.templateManager.template_process(state.template, context)
        except TemplateError as e:
            renders[name] = {"status": False, "output": None, "errors": [str(e)], "warnings": []}
            LOG_messages("error", [str(e)], source=name)
            continue

        validation = rendered["validation"]
        if appsettings.strict_mode and validation.warnings:
            renders[name] = {
                "status": False,
                "output": None,
                "errors": ["Strict mode: template produced warnings"],
                "warnings": validation.warnings,
            }
            LOG(summary_format(validation), level=1)
            continue

        output = note_outputPath(state, note["source"], ".typ")
        output.write_text(rendered["content"], encoding="utf-8")
        renders[name] = {"status": True, "output": output, "errors": [], "warnings": validation.warnings}
        LOG(f"{name} -> {output}", level=2)

    state.renderResults = renders
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Summarize the run.

    Args:
        inputstate: Program state after all processing stages

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any note had processing errors or failed to render
    """
    state: ProgramState = inputstate.copy()

    notes_failed = [n for n in state.processedNotes if n["result"].errors]
    renders_failed = [name for name, r in state.renderResults.items() if not r["status"]]
    warnings = sum(len(n["result"].warnings) for n in state.processedNotes)

    LOG("\n✓ Export finished", level=1)
    LOG(f"  Notes:    {len(state.processedNotes)}", level=1)
    LOG(f"  Warnings: {warnings}", level=1)
    if state.template:
        LOG(f"  Rendered: {len(state.renderResults) - len(renders_failed)}"
            f" with '{state.template}'", level=1)
    LOG(f"  Output:   {state.outputdir}", level=1)

    if notes_failed or renders_failed:
        for note in notes_failed:
            print(f"Error: {note['source']}: {'; '.join(note['result'].errors)}", file=sys.stderr)
        for name in renders_failed:
            print(f"Error: {name}: {'; '.join(state.renderResults[name]['errors'])}",
                  file=sys.stderr)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="mdtypst - note markdown to typesetting-ready markdown",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - normalize notes and optionally render templates.

    Orchestrates the export pipeline:
        1. env_check: Validate directories, load template
        2. notes_discover: Glob the notes
        3. notes_preprocess: Normalize each note, write .md and .json
        4. template_render: Render .typ files (with --template)
        5. results_report: Summarize, exit 1 on failures

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the notes
        outputdir: Directory where outputs will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, notes_discover, notes_preprocess, template_render, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
