"""Unit tests for structured logging configuration."""

import json
import logging
import sys

import pytest

from src.infrastructure.logging_config import StructuredFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestStructuredFormatter:
    """Test suite for StructuredFormatter."""

    def test_formats_json_with_extra(self):
        record = logging.LogRecord(
            name="src.adapters.ingesters.csv_ingester",
            level=logging.WARNING,
            pathname=__file__,
            lineno=10,
            msg="Rejected row %d",
            args=(3,),
            exc_info=None,
        )
        record.source = "data.csv"
        record.row_number = 3

        payload = json.loads(StructuredFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "src.adapters.ingesters.csv_ingester"
        assert payload["message"] == "Rejected row 3"
        assert payload["source"] == "data.csv"
        assert payload["row_number"] == 3
        assert "args" not in payload

    def test_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        payload = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in payload["exception"]


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_json_handler(self, restore_root_logger):
        setup_logging(use_json=True, log_level="debug")
        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_plain_handler_and_unknown_level(self, restore_root_logger):
        setup_logging(use_json=False, log_level="chatty")
        assert restore_root_logger.level == logging.INFO
        assert not isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)
