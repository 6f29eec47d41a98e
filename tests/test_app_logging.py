"""Tests for logging configuration."""

import logging

from nutrition_planner.app_logging import LOGGER_NAME, configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_module_loggers_inherit_package_level() -> None:
    logger = configure_logging(logging.WARNING)

    child = logging.getLogger("nutrition_planner.services.lookup")

    assert logger.name == LOGGER_NAME
    assert child.getEffectiveLevel() == logging.WARNING
    configure_logging()
