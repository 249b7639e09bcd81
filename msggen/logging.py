"""Logging for msggen: one ``msggen`` logger tree with per-type context.

Records emitted through :func:`unit_logger` carry the full name of the type
they concern. The console shows plain ``[msggen] LEVEL message`` lines; the
optional log file adds a ``[pkg/Name]`` column so a batch log can be filtered
per generated type.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "msggen"
UNIT_ATTRIBUTE = "unit"
NO_UNIT = "-"

CONSOLE_FORMAT = "[msggen] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(unit)s] %(message)s"


class UnitFormatter(logging.Formatter):
    """Formatter that tolerates records without a unit attribute."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, UNIT_ATTRIBUTE):
            setattr(record, UNIT_ATTRIBUTE, NO_UNIT)
        return super().format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the msggen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def unit_logger(logger: logging.Logger, full_name: str) -> logging.LoggerAdapter:
    """Bind ``full_name`` to every record logged through the returned adapter."""
    return logging.LoggerAdapter(logger, {UNIT_ATTRIBUTE: full_name})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and, when ``log_file`` is set, a file handler.

    Calling it again replaces the handlers of the previous call, so a config
    file can supply the log file after the command line has been parsed.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(UnitFormatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(UnitFormatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = [
    "NO_UNIT",
    "UNIT_ATTRIBUTE",
    "UnitFormatter",
    "configure_logging",
    "get_logger",
    "unit_logger",
]
