"""
Verbosity-gated logging for shaderprep, built on Loguru.

LOG() checks the verbosity of the ProgramState connected to the current
context and stays silent when none is connected, so a Workspace or
ExpansionEngine embedded in another application writes nothing to stderr.

Verbosity levels map onto Loguru levels:
    1 (default) -> INFO     one line per shader expanded or written
    2 (-v)      -> DEBUG    files entered, includes resolved, constants loaded
    3 (-vv)     -> TRACE    every if/const/include directive as it is walked

Usage:
    from shaderprep.lib.log import LOG, state_connectToLogger

    state_connectToLogger(state)
    LOG("Expanding main.wgsl", level=1)
    LOG("main.wgsl:4: include shared/math.wgsl", level=2)
    LOG("main.wgsl:7: if quality >= 4.0 -> True", level=3)
"""

from loguru import logger
from typing import Any, Dict, Optional
from contextvars import ContextVar
import sys

# ProgramState of the running CLI pipeline (None when used as a library)
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

LEVEL_NAMES: Dict[int, str] = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{module: <10}</cyan>:<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: ProgramState instance with a verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if the connected state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity required (1=normal, 2=verbose, 3=trace)
        **kwargs: Additional loguru metadata
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        name = LEVEL_NAMES.get(level, "TRACE")
        logger.opt(depth=1).log(name, message, **kwargs)
