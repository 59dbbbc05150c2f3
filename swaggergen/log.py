"""Route swaggergen's log records to stderr for the command line.

Library modules log through ``logging.getLogger(__name__)``, so every record
lands under the ``swaggergen`` logger. stdout is reserved for the generated
sources.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

ROOT_LOGGER = "swaggergen"
_HANDLER_NAME = "swaggergen-cli"


def parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level {level!r}")
    return resolved


class DiagnosticFormatter(logging.Formatter):
    """Compiler-style ``swaggergen: warning: ...`` lines for diagnostics."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            return f"{ROOT_LOGGER}: {record.levelname.lower()}: {message}"
        return message


def configure_logging(level: str | int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Send swaggergen records at ``level`` and above to ``stream`` (stderr).

    Each call replaces the handler installed by the previous one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(DiagnosticFormatter())
    logger.addHandler(handler)
    logger.setLevel(parse_level(level))
    logger.propagate = False
    return logger
