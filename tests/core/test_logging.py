# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from archivestore.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs structured JSON."""
        from archivestore.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        log_line = captured.err.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "test message"
        assert data["key"] == "value"

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs human-readable in console mode."""
        from archivestore.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.err
        assert not captured.err.strip().startswith("{")

    def test_internal_fields_not_emitted(self, capsys: pytest.CaptureFixture[str]) -> None:
        from archivestore.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").info("fields check")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert "_record" not in data
        assert "_from_structlog" not in data

    def test_noisy_third_party_loggers_silenced(self) -> None:
        """Configuration-loading libraries stay at WARNING even in DEBUG mode."""
        from archivestore.core.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG
        for name in ("dynaconf", "dotenv.main"):
            assert logging.getLogger(name).getEffectiveLevel() >= logging.WARNING

    def test_noisy_loggers_follow_stricter_root_level(self) -> None:
        from archivestore.core.logging import configure_logging

        configure_logging(level="ERROR")

        assert logging.getLogger("dynaconf").level == logging.ERROR

    def test_stdlib_loggers_emit_json_when_json_output_enabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Host modules using logging.getLogger(__name__) produce the same JSON format."""
        from archivestore.core.logging import configure_logging

        configure_logging(json_output=True)

        logging.getLogger("test.stdlib.module").info("message from stdlib logger")

        captured = capsys.readouterr()
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "message from stdlib logger"
        assert "level" in data
        assert "timestamp" in data

    def test_driver_store_is_logged(self, capsys: pytest.CaptureFixture[str], localdir, make_source_file) -> None:
        """Drivers log through the configured pipeline with structured fields."""
        from archivestore.core.logging import configure_logging

        configure_logging(json_output=True)

        localdir.store(7, make_source_file("a.txt", b"abc"), "logs")

        lines = [json.loads(line) for line in capsys.readouterr().err.strip().split("\n") if line.startswith("{")]
        stored = [line for line in lines if line["event"] == "Stored file"]
        assert len(stored) == 1
        assert stored[0]["job_id"] == 7
        assert stored[0]["backend"] == "localdir"
        assert stored[0]["size_bytes"] == 3
