"""Logging setup for pipegen commands and services."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "pipegen"
# httpx logs every request at INFO; only useful when troubleshooting a backend.
_HTTP_LOGGERS = ("httpx", "httpcore")

CONSOLE_FORMAT = "[pipegen] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the pipegen hierarchy, e.g. ``pipegen.orchestrator.analysis``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route pipegen logs to stderr and, when ``log_file`` is set, append them to that file.

    The file sink records analysis and generation failures so they can be
    inspected after a ``serve`` session or a batch of ``generate`` runs.
    Calling this again replaces (and closes) the previous handlers.
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
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(sink)

    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


__all__ = ["configure_logging", "get_logger"]
