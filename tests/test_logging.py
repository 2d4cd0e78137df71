# tests/test_logging.py
"""Tests for structured logging utilities."""

import io
import json
import logging

import pytest

from file_guard.utils import (
    StructuredFormatter,
    bind_log_context,
    clear_log_context,
    configure_structured_logging,
    get_log_context,
)


@pytest.fixture
def restore_root_logger():
    level = logging.root.level
    handlers = list(logging.root.handlers)
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


@pytest.fixture(autouse=True)
def empty_log_context():
    clear_log_context()
    yield
    clear_log_context()


def _record(message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("file_guard.test", level, __file__, 1, message, (), None)


class TestLogContext:
    """Tests for bind_log_context and get_log_context."""

    def test_binds_known_fields(self):
        bind_log_context(session_id="s-1", tool="Read")
        bind_log_context(decision="blocked")
        assert get_log_context() == {
            "session_id": "s-1",
            "tool": "Read",
            "decision": "blocked",
        }

    def test_ignores_unknown_and_empty_fields(self):
        bind_log_context(session_id="", colour="blue", hook_event="PreToolUse")
        assert get_log_context() == {"hook_event": "PreToolUse"}

    def test_clear(self):
        bind_log_context(tool="Edit")
        clear_log_context()
        assert get_log_context() == {}


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_formats_json(self):
        data = json.loads(StructuredFormatter().format(_record("blocked .env", logging.WARNING)))
        assert data["level"] == "WARNING"
        assert data["logger"] == "file_guard.test"
        assert data["message"] == "blocked .env"
        assert "timestamp" in data
        assert "decision" not in data

    def test_includes_decision_context(self):
        bind_log_context(session_id="session-42", tool="Read", decision="blocked")
        data = json.loads(StructuredFormatter().format(_record("hello")))
        assert data["session_id"] == "session-42"
        assert data["tool"] == "Read"
        assert data["decision"] == "blocked"


class TestConfigureStructuredLogging:
    """Tests for configure_structured_logging."""

    def test_writes_json_to_stream(self, restore_root_logger):
        stream = io.StringIO()
        configure_structured_logging("INFO", stream=stream)

        logging.getLogger("file_guard.test").info("decision made")

        line = stream.getvalue().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "decision made"

    def test_plain_text_and_level_filtering(self, restore_root_logger):
        stream = io.StringIO()
        configure_structured_logging("warning", stream=stream, structured=False)

        logger = logging.getLogger("file_guard.test")
        logger.info("hidden")
        logger.warning("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "WARNING file_guard.test: shown" in output

    def test_unknown_level_falls_back_to_warning(self, restore_root_logger):
        configure_structured_logging("LOUD", stream=io.StringIO())
        assert logging.root.level == logging.WARNING
