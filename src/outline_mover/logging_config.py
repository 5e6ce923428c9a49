"""Logging configuration for outline-mover."""

import sys
from typing import TextIO

from loguru import logger

_FORMAT = "{level.icon} {message}"
_VERBOSE_FORMAT = "{time:HH:mm:ss.SSS} {level.icon} {name}:{line} {message}"


def configure_logging(*, verbose: bool = False, sink: TextIO | None = None) -> None:
    """Send loguru output to stderr: INFO by default, DEBUG with source location if verbose."""
    logger.remove()
    if verbose:
        logger.add(sink or sys.stderr, level="DEBUG", format=_VERBOSE_FORMAT)
    else:
        logger.add(sink or sys.stderr, level="INFO", format=_FORMAT)
