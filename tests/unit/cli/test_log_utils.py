"""Tests for logging setup."""

import logging

import pytest

from gimport.log_utils import setup_logging


@pytest.fixture
def root_logger():
    logger = logging.getLogger()
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


def _gimport_handlers(logger):
    return [h for h in logger.handlers if (h.get_name() or "").startswith("gimport-")]


class TestSetupLogging:
    def test_writes_to_log_file(self, tmp_path, root_logger):
        log_file = tmp_path / "logs" / "gimport.log"
        setup_logging(log_file)

        logging.info("Opening project app")
        for handler in _gimport_handlers(root_logger):
            handler.flush()

        text = log_file.read_text()
        assert "root - INFO - Opening project app" in text

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path, root_logger):
        setup_logging(tmp_path / "a.log")
        setup_logging(tmp_path / "b.log", verbose=True)

        assert len(_gimport_handlers(root_logger)) == 2
        assert root_logger.level == logging.DEBUG
