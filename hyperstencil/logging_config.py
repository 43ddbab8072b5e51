"""Console logging for the hyperstencil command line.

Format:
    INFO     | hyperstencil.image_stencil | encoding in.png (4x4) into 3 layers

Levels are coloured with ANSI codes when stderr is a terminal.
Idempotent: repeated setup_logging() calls don't duplicate handlers.
"""

import logging
import sys

_handler = None

COLORS = {
    'DEBUG': '\033[36m',    # Cyan
    'INFO': '\033[32m',     # Green
    'WARNING': '\033[33m',  # Yellow
    'ERROR': '\033[31m',    # Red
    'CRITICAL': '\033[35m', # Magenta
}
RESET = '\033[0m'
BOLD_RED = '\033[1;31m'


class ConsoleFormatter(logging.Formatter):
    """Level | logger | message, with optional colour on the level."""

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{COLORS.get(record.levelname, '')}{level}{RESET}"

        line = f"{level} | {record.name} | {record.getMessage()}"
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(level: str = "INFO", use_color: bool = True) -> logging.Logger:
    """Configure the package logger on stderr. Later calls reuse the same handler."""
    global _handler

    logger = logging.getLogger("hyperstencil")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        logger.addHandler(_handler)
        logger.propagate = False
    else:
        _handler.stream = sys.stderr
    _handler.setFormatter(ConsoleFormatter(use_color=use_color and sys.stderr.isatty()))

    return logger


def error_prefix(use_color: bool = True) -> str:
    """The "error:" tag printed before fatal messages, red and bold on a terminal."""
    if use_color and sys.stderr.isatty():
        return f"{BOLD_RED}error:{RESET}"
    return "error:"
