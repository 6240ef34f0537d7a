"""Tests for odm.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from odm.logging import configure_logging, get_logger, level_for_verbosity


@pytest.mark.parametrize(
    "verbosity, level",
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG), (-1, logging.WARNING)],
)
def test_level_for_verbosity(verbosity: int, level: int) -> None:
    assert level_for_verbosity(verbosity) == level


def test_get_logger_is_namespaced() -> None:
    assert get_logger("resolve").name == "odm.resolve"
    assert get_logger().name == "odm"


def test_configure_logging_replaces_handlers_and_writes_file(tmp_path: Path) -> None:
    log_file = tmp_path / "odm.log"

    configure_logging(verbosity=0)
    logger = configure_logging(verbosity=2, log_file=log_file)
    get_logger("resolve").debug("Updating dependency %s", "foo")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    assert "Updating dependency foo" in log_file.read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
