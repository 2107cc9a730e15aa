"""Runtime infrastructure for quartermaster.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Client settings via load_settings(), Settings

Usage:
    from quartermaster.runtime import get_logger, load_settings

    logger = get_logger(__name__)
    settings = load_settings()
    print(settings.api_url)
"""

from quartermaster.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOGGER_NAMESPACE,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    parse_log_level,
    set_log_level,
)
from quartermaster.runtime.paths import ProjectPaths, get_paths, reset_paths
from quartermaster.runtime.settings import Settings, load_settings, load_settings_file

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "parse_log_level",
    "LOGGER_NAMESPACE",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
    # Settings
    "Settings",
    "load_settings",
    "load_settings_file",
]
