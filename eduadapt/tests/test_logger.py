import json
import logging
import os
import tempfile
import unittest

from eduadapt.common.config import LoggingConfig
from eduadapt.common.logger import (
    JsonFormatter, LoggerAdapter, app_logger, configure_from_config, log_execution_time, with_context
)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestLogger(unittest.TestCase):
    """Test logging helpers."""

    def setUp(self):
        self.logger = app_logger.getChild("tests.logger")
        self.logger.setLevel(logging.DEBUG)
        self.handler = ListHandler()
        self.logger.addHandler(self.handler)

    def tearDown(self):
        self.logger.removeHandler(self.handler)
        self.logger.setLevel(logging.NOTSET)

    def test_adapter_context(self):
        """Test adapter context is merged under the data extra."""
        adapter = LoggerAdapter(self.logger, {"subject_id": "s1"}).with_context(lecture_id="L1")
        adapter.info("hello", extra={"data": {"count": 2}})

        record = self.handler.records[-1]
        self.assertEqual(record.data, {"count": 2, "subject_id": "s1", "lecture_id": "L1"})

    def test_json_formatter(self):
        """Test JSON output includes the context fields."""
        adapter = with_context(self.logger.name, request="r1")
        adapter.warning("formatted")

        payload = json.loads(JsonFormatter().format(self.handler.records[-1]))
        self.assertEqual(payload["message"], "formatted")
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["request"], "r1")

    def test_log_execution_time(self):
        """Test timing is logged and failures re-raised."""
        @log_execution_time(self.logger)
        def works():
            return 42

        @log_execution_time(self.logger)
        def fails():
            raise ValueError("boom")

        self.assertEqual(works(), 42)
        self.assertIn("works executed in", self.handler.records[-1].getMessage())

        with self.assertRaises(ValueError):
            fails()
        self.assertEqual(self.handler.records[-1].levelno, logging.ERROR)


class TestConfigureFromConfig(unittest.TestCase):
    """Test configuring the engine logger from settings."""

    def tearDown(self):
        configure_from_config(LoggingConfig())

    def test_json_file_output(self):
        """Test level, JSON format and file handler come from the config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "logs", "engine.log")
            logger = configure_from_config(LoggingConfig(level="debug", json_output=True, file_path=path))

            self.assertIs(logger, app_logger)
            self.assertEqual(logger.level, logging.DEBUG)
            self.assertTrue(all(isinstance(h.formatter, JsonFormatter) for h in logger.handlers))

            app_logger.getChild("tests").info("to file")
            configure_from_config(LoggingConfig())

            with open(path, encoding="utf-8") as f:
                self.assertEqual(json.loads(f.readline())["message"], "to file")
