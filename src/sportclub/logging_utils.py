"""Logging utilities for the sportclub package."""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


def setup_logging(level: str | int = logging.WARNING) -> None:
    """Configure root logging for command-line use.

    Library modules only create loggers; handlers are installed here, by
    the application entry point.

    Args:
        level: A level name such as ``"DEBUG"`` or a numeric level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, force=True)
    # urllib3 logs every connection at DEBUG; keep it out of -v output.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
