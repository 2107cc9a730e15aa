"""Tests for the qm logging namespace."""

from __future__ import annotations

import logging

import pytest

from quartermaster.runtime import (
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    LOGGER_NAMESPACE,
    get_logger,
    parse_log_level,
    set_log_level,
)


@pytest.fixture
def namespace():
    logger = logging.getLogger(LOGGER_NAMESPACE)
    previous = logger.level
    yield logger
    set_log_level(previous)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("debug", logging.DEBUG),
        (" Warn ", logging.WARNING),
        ("ERROR", logging.ERROR),
        ("chatty", logging.INFO),
        ("", logging.INFO),
        (None, logging.INFO),
    ],
)
def test_parse_log_level(raw: str | None, expected: int) -> None:
    assert parse_log_level(raw) == expected


def test_get_logger_nests_under_namespace() -> None:
    logger = get_logger("quartermaster.cli.main")

    assert logger.name == "qm.quartermaster.cli.main"
    assert logging.getLogger(LOGGER_NAMESPACE).propagate is False
    assert len(logging.getLogger(LOGGER_NAMESPACE).handlers) == 1


def test_set_log_level_switches_format(namespace: logging.Logger) -> None:
    set_log_level(logging.DEBUG)
    assert namespace.level == logging.DEBUG
    assert namespace.handlers[0].formatter._fmt == LOG_FORMAT_DEBUG

    set_log_level(logging.WARNING)
    assert namespace.level == logging.WARNING
    assert namespace.handlers[0].formatter._fmt == LOG_FORMAT
