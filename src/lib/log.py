"""
Centralized logging using Loguru with context-aware verbosity.

LOG() respects the verbosity of the ProgramState connected to the current
context, so lib modules can trace their passes without having a state (or a
logger) passed in. Outside the CLI nothing is connected and LOG() is silent,
which keeps library use and tests quiet.

Usage:
    from mdtypst.lib.log import LOG, state_connectToLogger

    # At start of a pipeline stage:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Preprocessing 12 notes", level=1)
    LOG("Callouts pass: 3 converted", level=2)
    LOG("Embed found: ![[chart.png|300]]", level=3)
"""

from loguru import logger
from typing import Any, Iterable, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{module: <12}</cyan>:<cyan>{function: <22}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: Any object with an integer `verbosity` attribute

    Example:
        def notes_preprocess(inputstate: ProgramState) -> ProgramState:
            state = inputstate.copy()
            state_connectToLogger(state)
            LOG("Preprocessing notes...", level=1)
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """Verbosity of the connected state, 0 when nothing is connected"""
    state = _program_state.get()
    if state is None:
        return 0
    return int(getattr(state, 'verbosity', 0))


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru arguments

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v): one summary line per pass or operation
        3 = Debug (-vv): one line per match (embed, callout, link)
    """
    if verbosity_get() >= level:
        # depth=1 reports the caller rather than LOG itself
        logger.opt(depth=1).debug(message, **kwargs)


def LOG_messages(kind: str, messages: Iterable[str], source: str = "") -> None:
    """
    Report user-facing warnings or errors through loguru.

    Unlike LOG() these are emitted at WARNING/ERROR level whenever a state
    is connected, since they are part of the result rather than a trace.

    Args:
        kind: "warning" or "error"
        messages: Message strings, shown verbatim
        source: Optional prefix (e.g., the note file name)
    """
    if verbosity_get() < 1:
        return
    emit = logger.opt(depth=1).error if kind == "error" else logger.opt(depth=1).warning
    prefix = f"{source}: " if source else ""
    for message in messages:
        emit(f"{prefix}{message}")
