"""
Logging setup for the installed-package inventory.

Modules log through ``logging.getLogger(__name__)``, so every logger is a child
of ``scoop_inventory``. Scanner lines start with a phase tag such as
``[warmup]``, ``[scan]`` or ``[refresh]``; handlers installed here expose it
as ``record.phase`` so console output can highlight it and the log file can
be filtered by phase.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "scoop_inventory"

PHASES = ("warmup", "scan", "refresh")
PHASE_PATTERN = re.compile(r"^\[(%s)\]" % "|".join(PHASES))
NO_PHASE = "-"

CONSOLE_FORMAT = "%(levelname_colored)s %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(phase)-7s %(threadName)s %(name)s: %(message)s"

_logger: Optional[logging.Logger] = None


def phase_of(message: str) -> str:
    """
    Extract the scan phase a log message is tagged with.

    Args:
        message: Formatted log message

    Returns:
        Phase name, or "-" for untagged messages
    """
    match = PHASE_PATTERN.match(message)
    return match.group(1) if match else NO_PHASE


class PhaseFilter(logging.Filter):
    """Sets ``record.phase`` from the message's leading phase tag."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.phase = phase_of(record.getMessage())
        return True


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the ``scoop_inventory`` logger.

    Console lines go to stderr so listings printed to stdout stay clean.
    The optional log file always records DEBUG and above, with phase and
    worker thread for each line.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        verbose: Enable verbose (DEBUG) output
        quiet: Suppress console output (file only)
        propagate: Allow log propagation (useful for testing)

    Returns:
        Configured logger instance
    """
    global _logger

    if verbose:
        effective_level = "DEBUG"
    elif quiet:
        effective_level = "WARNING"
    else:
        effective_level = level.upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, effective_level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    phase_filter = PhaseFilter()

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, effective_level))
        console_handler.addFilter(phase_filter)
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, use_colors=sys.stderr.isatty()))
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(phase_filter)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.propagate = propagate

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    Get the configured logger, setting up defaults on first use.

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


class ColoredFormatter(logging.Formatter):
    """
    Console formatter: colored level names and a highlighted phase tag.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[1;31m', # Bold Red
    }
    PHASE_COLORS = {
        'warmup': '\033[2m',      # Dim
        'scan': '\033[34m',       # Blue
        'refresh': '\033[35m',    # Magenta
    }
    RESET = '\033[0m'

    SYMBOLS = {
        'DEBUG': '·',
        'INFO': '✓',
        'WARNING': '⚠',
        'ERROR': '✗',
        'CRITICAL': '✗✗',
    }

    def __init__(self, fmt: str = CONSOLE_FORMAT, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        if not hasattr(record, "phase"):
            record.phase = phase_of(record.getMessage())

        if not self.use_colors:
            record.levelname_colored = record.levelname
            return super().format(record)

        levelname = record.levelname
        color = self.COLORS.get(levelname, '')
        symbol = self.SYMBOLS.get(levelname, '')
        record.levelname_colored = f"{color}{symbol} {levelname}{self.RESET}"

        formatted = super().format(record)
        phase_color = self.PHASE_COLORS.get(record.phase)
        if phase_color:
            tag = f"[{record.phase}]"
            formatted = formatted.replace(tag, f"{phase_color}{tag}{self.RESET}", 1)
        return formatted
