"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the current ProgramState's
verbosity level without requiring explicit state passing, and fatal() for
diagnostics that end the run.

All output goes to stderr; stdout is reserved for the rendered document.

Usage:
    from lib.log import LOG, state_connectToLogger, fatal

    # At start of pipeline:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Stage progress appears if verbosity >= 1", level=1)
    LOG("Per-block details appear if verbosity >= 2", level=2)
    LOG("Command lines and exit codes appear if verbosity >= 3", level=3)

    # Abort the run:
    fatal(f"Failed to open {path}")
"""

from loguru import logger
from typing import Any, NoReturn, Optional, TextIO
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Configure loguru with csprender-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")

FATAL_PREFIX_TTY = "\033[1m\033[31mfatal: \033[0m"
FATAL_PREFIX = "fatal: "


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this at the start of the pipeline to make the state's verbosity
    setting available to LOG() calls throughout that context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        0 = Silent (default)
        1 = Stage progress (-v)
        2 = Per-block detail (-vv)
        3 = Command lines and exit codes (-vvv)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str) -> None:
    """Log a warning regardless of verbosity"""
    logger.opt(depth=1).warning(message)


def fatal_format(message: str, stream: TextIO) -> str:
    """
    Format a fatal diagnostic for the given stream

    The prefix is bold red when the stream is an interactive terminal.

    Example:
        >>> import io
        >>> fatal_format("Missing input file", io.StringIO())
        'fatal: Missing input file\\n'
    """
    isatty = getattr(stream, "isatty", None)
    prefix = FATAL_PREFIX_TTY if isatty is not None and isatty() else FATAL_PREFIX
    return f"{prefix}{message}\n"


def fatal(message: str) -> NoReturn:
    """
    Print a fatal diagnostic to stderr and end the run with status 1

    Output already written to the output sink is left in place.
    """
    sys.stderr.write(fatal_format(message, sys.stderr))
    sys.stderr.flush()
    sys.exit(1)
