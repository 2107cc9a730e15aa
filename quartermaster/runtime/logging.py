"""Logging setup for the ``qm`` logger namespace.

Usage:
    from quartermaster.runtime import get_logger
    logger = get_logger(__name__)

    logger.debug("Resolved %d candidates", count)

Pure domain modules call ``logging.getLogger(f"qm.{__name__}")`` themselves
so they never import runtime code. Their records reach the handler installed
here all the same.

Environment variables:
    QUARTERMASTER_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: INFO
"""

import logging
import os
import sys

LOGGER_NAMESPACE = "qm"
LOG_LEVEL_ENV = "QUARTERMASTER_LOG_LEVEL"

DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_handler: logging.Handler | None = None


def parse_log_level(value: str | None, default: int = DEFAULT_LOG_LEVEL) -> int:
    """Map a level name (any case) to its numeric level; unknown names give ``default``."""
    if not value:
        return default
    return _LEVEL_NAMES.get(value.strip().upper(), default)


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None) -> None:
    """Install one stderr handler on the ``qm`` namespace; later calls are no-ops."""
    global _handler

    if _handler is not None:
        return

    if level is None:
        level = parse_log_level(os.environ.get(LOG_LEVEL_ENV))

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(_formatter_for(level))

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level)
    namespace.addHandler(_handler)
    namespace.propagate = False


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the namespace level; the debug format carries line numbers."""
    configure_logging(level)
    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)
    if _handler is not None:
        _handler.setFormatter(_formatter_for(level))
