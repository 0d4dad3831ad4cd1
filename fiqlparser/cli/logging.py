from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "fiqlparser"


@dataclass(frozen=True, slots=True)
class LoggingState:
    level: int
    propagate: bool
    handlers: tuple[logging.Handler, ...]


def _level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(*, verbosity: int) -> LoggingState:
    """
    Route library logs to stderr through rich.

    Returns the previous logger state so `restore_logging` can undo the change
    (the CLI runs in-process under tests).
    """
    logger = logging.getLogger(_LOGGER_NAME)
    previous = LoggingState(
        level=logger.level,
        propagate=logger.propagate,
        handlers=tuple(logger.handlers),
    )
    handler = RichHandler(
        console=Console(file=sys.stderr, force_terminal=False),
        show_time=False,
        show_path=verbosity >= 2,
    )
    logger.handlers = [handler]
    logger.setLevel(_level_for(verbosity))
    logger.propagate = False
    return previous


def restore_logging(state: LoggingState) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.handlers = list(state.handlers)
    logger.setLevel(state.level)
    logger.propagate = state.propagate
