"""Tests for the glue_gen logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from glue_gen.logging import configure_logging, get_logger


@pytest.fixture
def root_logger():
    logger = logging.getLogger("glue_gen")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_get_logger_nests_under_glue_gen() -> None:
    assert get_logger().name == "glue_gen"
    assert get_logger("generator").name == "glue_gen.generator"


def test_configure_logging_replaces_handlers(root_logger: logging.Logger) -> None:
    configure_logging()
    configure_logging(verbose=True)

    assert len(root_logger.handlers) == 1
    assert root_logger.level == logging.DEBUG
    assert not root_logger.propagate


def test_configure_logging_writes_the_log_file(root_logger: logging.Logger, tmp_path: Path) -> None:
    log_file = tmp_path / "glue_gen.log"
    configure_logging(log_file=log_file)

    get_logger("modules").info("  Engine => Generated")
    for handler in root_logger.handlers:
        handler.flush()

    assert "INFO glue_gen.modules:   Engine => Generated" in log_file.read_text(encoding="utf-8")
