"""Tests for correlation-aware logging."""

import logging

import pytest

from xml_json_converter.shared.logging import CorrelationLogger, get_logger


class TestCorrelationLogger:
    """Test suite for CorrelationLogger."""

    def test_component_defaults_to_last_name_part(self):
        """Test component name derivation."""
        logger = CorrelationLogger("xml_json_converter.tree.builder")

        assert logger.component == "builder"
        assert logger.correlation_id is None

    def test_get_logger(self):
        """Test the factory function."""
        logger = get_logger("some.module", "req-1", "custom")

        assert isinstance(logger, CorrelationLogger)
        assert logger.correlation_id == "req-1"
        assert logger.component == "custom"

    def test_records_carry_correlation_extra(self, caplog):
        """Test that emitted records carry component and correlation ID."""
        logger = get_logger("xml_json_converter.test", "req-42")

        with caplog.at_level(logging.INFO, logger="xml_json_converter.test"):
            logger.info("hello", extra={"items": 3})

        record = caplog.records[-1]
        assert record.getMessage() == "hello"
        assert record.correlation_id == "req-42"
        assert record.component == "test"
        assert record.items == 3

    def test_warning_without_traceback(self, caplog):
        """Test that warnings do not attach exception info by default."""
        logger = get_logger("xml_json_converter.test")

        with caplog.at_level(logging.WARNING, logger="xml_json_converter.test"):
            logger.warning("careful")

        assert caplog.records[-1].levelno == logging.WARNING
        assert caplog.records[-1].exc_info is None

    def test_is_enabled_for(self):
        """Test level checks delegate to the wrapped logger."""
        logger = get_logger("xml_json_converter.level_check")
        logger.logger.setLevel(logging.ERROR)
        try:
            assert logger.is_enabled_for(logging.ERROR)
            assert not logger.is_enabled_for(logging.DEBUG)
        finally:
            logger.logger.setLevel(logging.NOTSET)


class TestTimed:
    """Test suite for the timed context manager."""

    def test_logs_start_and_finish(self, caplog):
        """Test that both boundaries are logged with elapsed time."""
        logger = get_logger("xml_json_converter.timed")

        with caplog.at_level(logging.DEBUG, logger="xml_json_converter.timed"):
            with logger.timed("work", extra={"source": "x"}) as details:
                details["count"] = 2

        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["Starting work", "Finished work"]
        finished = caplog.records[-1]
        assert finished.count == 2
        assert finished.source == "x"
        assert finished.elapsed_ms >= 0
        assert details["elapsed_ms"] >= 0

    def test_finish_logged_when_block_raises(self, caplog):
        """Test that completion is recorded even on failure."""
        logger = get_logger("xml_json_converter.timed")

        with caplog.at_level(logging.DEBUG, logger="xml_json_converter.timed"):
            with pytest.raises(RuntimeError):
                with logger.timed("work"):
                    raise RuntimeError("boom")

        assert caplog.records[-1].getMessage() == "Finished work"
