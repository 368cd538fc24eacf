"""
Tests for structured logging
"""

import io
import json
import logging

from atm_ledger.logging_config import JSONFormatter, get_logger, log_action, setup_logging


class TestLogging:
    """Test formatter and helpers"""

    def test_json_formatter(self):
        """Test that records become single-line JSON objects without empty fields"""
        record = logging.LogRecord("atm_ledger.test", logging.WARNING, __file__, 1,
                                   "Failed to write %s", ("transactions.csv",), None)
        record.action = "save"

        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "WARNING"
        assert entry["message"] == "Failed to write transactions.csv"
        assert entry["action"] == "save"
        assert "resource" not in entry
        assert "timestamp" in entry

    def test_log_action_structured_fields(self):
        """Test that log_action attaches action, resource and extra"""
        stream = io.StringIO()
        logger = setup_logging("INFO", logger_name="atm_ledger_test.structured", stream=stream)

        log_action(logger, "info", "Deposit of 1.00", action="deposit",
                   resource="ledger", extra={"amount_cents": 100})

        entry = json.loads(stream.getvalue())
        assert entry["message"] == "Deposit of 1.00"
        assert entry["action"] == "deposit"
        assert entry["resource"] == "ledger"
        assert entry["extra"] == {"amount_cents": 100}
        assert entry["module"] == "test_logging_config"

    def test_log_action_respects_level(self):
        """Test that records below the logger level are dropped"""
        stream = io.StringIO()
        logger = setup_logging("WARNING", logger_name="atm_ledger_test.level", stream=stream)

        log_action(logger, "info", "ignored", action="deposit")
        assert stream.getvalue() == ""

        log_action(logger, "warning", "kept")
        assert "kept" in stream.getvalue()

    def test_text_format(self):
        """Test plain text output"""
        stream = io.StringIO()
        logger = setup_logging("INFO", logger_name="atm_ledger_test.text",
                               log_format="text", stream=stream)
        logger.info("hello")

        output = stream.getvalue()
        assert "INFO atm_ledger_test.text: hello" in output
        assert not output.startswith("{")

    def test_setup_replaces_handlers(self):
        """Test that repeated setup does not duplicate output"""
        stream = io.StringIO()
        setup_logging("INFO", logger_name="atm_ledger_test.repeat", stream=stream)
        logger = setup_logging("INFO", logger_name="atm_ledger_test.repeat", stream=stream)
        logger.info("once")

        assert stream.getvalue().count("once") == 1
        assert get_logger("atm_ledger_test.repeat") is logger
        assert logger.propagate is False
