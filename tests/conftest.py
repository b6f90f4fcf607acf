from __future__ import annotations

import logging

import pytest

from page_harvest.config import AppConfig
from page_harvest.logging_utils import LOGGER_NAME


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo setup_logging() so caplog keeps seeing package records."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.fixture
def cfg(tmp_path):
    config = AppConfig()
    config.cache.dir = str(tmp_path / ".cache")
    config.output.results_dir = str(tmp_path / "data")
    config.logging.console = False
    return config
