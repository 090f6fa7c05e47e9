"""Unit tests for logging configuration."""

import json
import logging

import pytest

from hookflow.libraries.base import ProcessorLogger
from hookflow.logging_config import (
    ROOT_LOGGER_NAME,
    LogContext,
    clear_context,
    configure_logging,
    get_context,
    get_logger,
    set_context,
)


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging so other tests keep propagating records."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    level, propagate = root.level, root.propagate
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)
    root.propagate = propagate
    clear_context()


class TestGetLogger:
    """Test logger naming."""

    def test_module_names_are_namespaced(self):
        assert get_logger("hookflow.analysis").name == "hookflow.analysis"
        assert get_logger("tests.helper").name == "hookflow.tests.helper"
        assert get_logger("hookflow").name == "hookflow"


class TestLogContext:
    """Test context propagation."""

    def test_context_is_scoped(self):
        with LogContext(operation="analyze_component", file="Counter.tsx"):
            assert get_context() == {"operation": "analyze_component", "file": "Counter.tsx"}
            with LogContext(hook="useState"):
                assert get_context()["hook"] == "useState"
                assert get_context()["file"] == "Counter.tsx"
            assert "hook" not in get_context()
        assert get_context() == {}

    def test_context_survives_exceptions(self):
        with pytest.raises(ValueError):
            with LogContext(operation="classify"):
                raise ValueError("boom")
        assert get_context() == {}

    def test_set_and_clear(self):
        set_context(component="Counter")
        assert get_context() == {"component": "Counter"}
        clear_context()
        assert get_context() == {}


class TestConfigureLogging:
    """Test handler installation."""

    def test_json_file_output(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "hookflow.log"
        configure_logging(level="DEBUG", json_output=True, log_file=str(log_file))

        with LogContext(file="Counter.tsx"):
            get_logger("hookflow.analysis").info("Analyzing component Counter")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["level"] == "INFO"
        assert record["logger"] == "hookflow.analysis"
        assert record["message"] == "Analyzing component Counter"
        assert record["file"] == "Counter.tsx"

    def test_human_output_with_context(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "hookflow.log"
        configure_logging(level="INFO", log_file=str(log_file))

        with LogContext(framework="vue"):
            get_logger("hookflow.config").warning("Invalid timeout")
            get_logger("hookflow.config").debug("hidden")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        lines = log_file.read_text().splitlines()
        assert len(lines) == 1
        assert "WARNING" in lines[0]
        assert lines[0].endswith("Invalid timeout [framework=vue]")

    def test_reconfigure_replaces_handlers(self, tmp_path, restore_root_logger):
        configure_logging(log_file=str(tmp_path / "a.log"))
        root = configure_logging(log_file=str(tmp_path / "b.log"))
        assert len(root.handlers) == 1


class TestProcessorLogger:
    """Test the per-processor facade."""

    def test_messages_are_prefixed(self, caplog):
        log = ProcessorLogger("swr")
        with caplog.at_level(logging.DEBUG, logger="hookflow"):
            log.debug("Data values: data")
            log.warn("No atom name found")

        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["[swr] Data values: data", "[swr] No atom name found"]
        assert caplog.records[1].levelno == logging.WARNING
