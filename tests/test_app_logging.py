"""Tests for logging configuration."""

import logging
import sys

import pytest

from ingredient_resolver.app_logging import configure_logging


@pytest.fixture(autouse=True)
def _reset_package_logger():
    logger = logging.getLogger("ingredient_resolver")
    logger.handlers.clear()
    yield
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_configure_logging_idempotent() -> None:
    first = configure_logging()
    second = configure_logging(logging.DEBUG)

    assert first is second
    assert len(second.handlers) == 1
    assert second.handlers[0].stream is sys.stderr
    assert second.level == logging.DEBUG
    assert second.propagate is False


def test_level_names_are_accepted() -> None:
    logger = configure_logging("warning")

    assert logger.level == logging.WARNING
    with pytest.raises(ValueError):
        configure_logging("chatty")


def test_http_client_logs_follow_debug_only() -> None:
    configure_logging("INFO")
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging(logging.DEBUG)
    assert logging.getLogger("httpx").level == logging.DEBUG
    assert logging.getLogger("httpcore").level == logging.DEBUG
