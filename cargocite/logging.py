"""Logging helpers shared by the cargo-cite CLI and orchestrator."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "cargocite"
_CONSOLE_PREFIX = "[cargo-cite]"


class _ConsoleFormatter(logging.Formatter):
    """Render progress lines plainly and tag anything louder with its level."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno == logging.INFO:
            return f"{_CONSOLE_PREFIX} {message}"
        return f"{_CONSOLE_PREFIX} {record.levelname.lower()}: {message}"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger nested under the ``cargocite`` hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach a stderr console handler (and optionally a file sink) to the tool logger.

    Console output goes to stderr so that bibliographies printed with
    ``--filename STDOUT`` can be piped without interleaved progress lines.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(_ConsoleFormatter())
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
