"""Logging for projintel: component-tagged console output and an optional debug file.

Loggers live under the ``projintel`` hierarchy; ``get_logger("stack")`` is
reported on the console as ``[projintel:stack]``. Engine output never goes to
stdout, which the CLI reserves for JSON results.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "projintel"
_DEFAULT_COMPONENT = "core"

CONSOLE_FORMAT = "[projintel:%(component)s] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(component)s] %(message)s"


class ComponentFilter(logging.Filter):
    """Tag each record with the component it came from (``engine``, ``stack``, ...)."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = _LOGGER_NAME + "."
        if record.name.startswith(prefix):
            record.component = record.name[len(prefix) :].split(".", 1)[0]
        else:
            record.component = _DEFAULT_COMPONENT
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger for one projintel component; no name gives the package logger."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.addFilter(ComponentFilter())
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route projintel records to stderr and, when *log_file* is set, to a file.

    The console shows INFO and up unless *verbose*; the file always receives
    DEBUG records so a quiet run can still be diagnosed afterwards.
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose or log_file is not None else logging.INFO)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_handler(logging.StreamHandler(), console_level, CONSOLE_FORMAT))
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        logger.addHandler(_handler(file_handler, logging.DEBUG, FILE_FORMAT))
    return logger


__all__ = ["CONSOLE_FORMAT", "ComponentFilter", "FILE_FORMAT", "configure_logging", "get_logger"]
