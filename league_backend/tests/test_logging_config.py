"""
Tests for logging setup: app logger level, root kept quiet, date format.
"""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from league_backend.logging_config import APP_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    app_logger = logging.getLogger(APP_LOGGER)
    saved = (root.level, list(root.handlers), app_logger.level)
    yield
    root.handlers[:] = saved[1]
    root.setLevel(saved[0])
    app_logger.setLevel(saved[2])


def test_app_logger_follows_requested_level():
    setup_logging("debug")
    assert logging.getLogger(APP_LOGGER).level == logging.DEBUG
    assert logging.getLogger("league_backend.services.scheduling").isEnabledFor(logging.DEBUG)
    assert logging.getLogger().level == logging.WARNING


def test_date_format_is_configurable():
    setup_logging("info", datefmt="%d/%m/%Y")
    console = logging.getLogger().handlers[0]
    assert console.formatter.datefmt == "%d/%m/%Y"
    assert not logging.getLogger("league_backend.api").isEnabledFor(logging.DEBUG)
