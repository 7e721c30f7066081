"""
utils/logger.py — Project-wide logging configuration
=====================================================
Every module calls `get_logger("package.module")` and gets a logger with
colour-coded console output.  The default level can be raised or lowered
without touching code through the ``RPPG_LOG_LEVEL`` environment variable
(e.g. ``RPPG_LOG_LEVEL=DEBUG python demo_cli.py --synthetic``).
"""

import logging
import os
import sys

_COLOURS = {
    logging.DEBUG:    "\033[36m",   # cyan
    logging.INFO:     "\033[32m",   # green
    logging.WARNING:  "\033[33m",   # yellow
    logging.ERROR:    "\033[31m",   # red
    logging.CRITICAL: "\033[35m",   # magenta
}
_RESET = "\033[0m"

_BASE_FMT = "%(asctime)s  %(levelname)s  %(name)-22s  %(message)s"
_DATE_FMT = "%H:%M:%S"


class _ColourFormatter(logging.Formatter):
    """Wrap the level tag in ANSI colour when writing to a terminal."""

    def __init__(self, use_colour: bool):
        super().__init__(fmt=_BASE_FMT, datefmt=_DATE_FMT)
        self._use_colour = use_colour

    def format(self, record: logging.LogRecord) -> str:
        if not self._use_colour:
            return super().format(record)
        # Work on a copy so other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        colour = _COLOURS.get(record.levelno, _RESET)
        record.levelname = f"{colour}{record.levelname:<8}{_RESET}"
        return super().format(record)


def _default_level() -> int:
    name = os.environ.get("RPPG_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


# One logger per name; repeated calls must not stack handlers
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return (or create) a named logger.

    Parameters
    ----------
    name  : str         Component name shown in log lines, e.g. "rppg.pipeline".
    level : int | None  Minimum severity.  Defaults to ``RPPG_LOG_LEVEL`` or INFO.
    """
    if name in _loggers:
        return _loggers[name]

    level = _default_level() if level is None else level

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_ColourFormatter(use_colour=sys.stdout.isatty()))
    logger.addHandler(handler)

    _loggers[name] = logger
    return logger
