"""Tests for labeled logging output."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from card_listing.logging_setup import get_logger, log_summary, reset_logging, setup_logging


@pytest.fixture(autouse=True)
def _fresh_logging() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()


def test_setup_logging_labels_levels(capsys: pytest.CaptureFixture[str]) -> None:
    logger = setup_logging()
    logger.info("loaded")
    logger.warning("odd row")
    log_summary("exported=2")

    assert capsys.readouterr().out.splitlines() == ["INFO loaded", "WARN odd row", "SUMMARY exported=2"]


def test_setup_logging_is_idempotent_and_adjusts_level(capsys: pytest.CaptureFixture[str]) -> None:
    first = setup_logging()
    second = setup_logging(logging.DEBUG)
    assert first is second
    assert len(first.handlers) == 1

    logging.getLogger("card_listing.mapper").debug("slot skipped")
    assert capsys.readouterr().out == "DEBUG slot skipped\n"


def test_get_logger_configures_on_first_use() -> None:
    assert get_logger().name == "card_listing"
