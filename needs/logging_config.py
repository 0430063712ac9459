"""
Centralized logging configuration for needs.

Pipeline events carry a scope and key/value fields (see events.py); the
StructuredFormatter renders them as

    14:02  INFO [which] found bin=rg path=/usr/bin/rg
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO


# Global logger instance
_logger: Optional[logging.Logger] = None

LOGGER_NAME = "needs"

VERBOSITY_LEVELS = ("ERROR", "WARNING", "INFO", "DEBUG")


def level_for_verbosity(verbosity: int) -> str:
    """Map a repeated -v count to a level name (0 -> ERROR ... 3+ -> DEBUG)."""
    if verbosity < 0:
        verbosity = 0
    return VERBOSITY_LEVELS[min(verbosity, len(VERBOSITY_LEVELS) - 1)]


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output (always at DEBUG)
        verbose: Enable verbose (DEBUG) output
        quiet: Suppress console output (file only)
        propagate: Allow log propagation (useful for testing)
        stream: Console stream (default: stdout)

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
    # The file handler needs every record; handlers filter the console
    logger.setLevel(logging.DEBUG if log_file else getattr(logging, effective_level))

    # Clear existing handlers
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    if not quiet:
        stream = stream or sys.stdout
        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(getattr(logging, effective_level))
        isatty = getattr(stream, "isatty", None)
        console_handler.setFormatter(StructuredFormatter(use_colors=bool(isatty and isatty())))
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        file_handler.setFormatter(StructuredFormatter(use_colors=False, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    # Control propagation to root logger (disable by default for cleaner output)
    logger.propagate = propagate

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    Get the configured logger instance.

    If logging hasn't been set up, initializes with defaults.
    """
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


def _truecolor(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"\033[38;2;{r};{g};{b}m"


class StructuredFormatter(logging.Formatter):
    """
    Formatter for scoped key/value log records.

    Records may carry ``scope`` (shown in brackets before the message) and
    ``fields`` (a dict rendered as key=value pairs; multi-line values get
    their own indented block).
    """

    # Gum log colors
    COLORS = {
        'DEBUG': _truecolor((95, 96, 255)),
        'INFO': _truecolor((99, 254, 218)),
        'WARNING': _truecolor((219, 254, 143)),
        'ERROR': _truecolor((254, 95, 136)),
        'CRITICAL': _truecolor((254, 95, 136)),
    }
    KEY_COLOR = _truecolor((142, 142, 142))
    BOLD = '\033[1m'
    RESET = '\033[0m'

    LEVEL_LABELS = {
        'WARNING': 'WARN',
        'CRITICAL': 'CRIT',
    }

    def __init__(self, use_colors: bool = True, datefmt: str = "%H:%M"):
        super().__init__(datefmt=datefmt)
        self.use_colors = use_colors

    def _paint(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with scope and fields."""
        timestamp = self.formatTime(record, self.datefmt)
        label = f"{self.LEVEL_LABELS.get(record.levelname, record.levelname):>5}"
        label = self._paint(label, self.COLORS.get(record.levelname, ''))

        parts = [timestamp, label]
        scope = getattr(record, "scope", None)
        if scope:
            parts.append(f"[{self._paint(str(scope), self.BOLD)}]")
        parts.append(record.getMessage())
        line = " ".join(parts)

        fields = getattr(record, "fields", None) or {}
        single = []
        multiline = []
        for key in sorted(fields):
            value = str(fields[key])
            if "\n" in value:
                multiline.append((key, value))
            else:
                single.append((key, value))

        if single:
            line += " " + " ".join(
                f"{self._paint(key, self.KEY_COLOR)}{self._paint('=', self.KEY_COLOR)}{value}"
                for key, value in single
            )

        bar = self._paint("┊", self.KEY_COLOR)
        for key, value in multiline:
            body = f"\n  {bar} ".join(value.splitlines())
            line += f"\n  {self._paint(key, self.KEY_COLOR)}{self._paint('=', self.KEY_COLOR)}\n  {bar} {body}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line
