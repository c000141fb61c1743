"""
Tests for observability — logging setup and error formatting.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tokenforge.core.errors import ConfigNotFoundError, GenerationFailedError
from tokenforge.core.observability.logging_config import (
    HANDLER_PREFIX,
    LogSettings,
    console_formatter,
    parse_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if (handler.get_name() or "").startswith(HANDLER_PREFIX):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _ours() -> list[logging.Handler]:
    return [
        h for h in logging.getLogger().handlers
        if (h.get_name() or "").startswith(HANDLER_PREFIX)
    ]


class TestParseLevel:
    """Tests for parse_level()."""

    @pytest.mark.parametrize(
        "value, expected",
        [("debug", logging.DEBUG), (" Info ", logging.INFO), (logging.ERROR, logging.ERROR),
         ("LOUD", logging.WARNING), (None, logging.WARNING), ("", logging.WARNING)],
    )
    def test_values(self, value: object, expected: int):
        assert parse_level(value) == expected


class TestLogSettings:
    """Tests for LogSettings.from_flags()."""

    def test_debug_wins(self):
        settings = LogSettings.from_flags(verbose=True, quiet=True, debug=True, environ={})
        assert settings.console_level == logging.DEBUG
        assert settings.quiet_third_party is False

    def test_verbose(self):
        assert LogSettings.from_flags(verbose=True, environ={}).console_level == logging.INFO

    def test_quiet(self):
        assert LogSettings.from_flags(quiet=True, environ={}).console_level == logging.ERROR

    def test_environment_fallback(self):
        settings = LogSettings.from_flags(environ={"TOKENFORGE_LOG_LEVEL": "info"})
        assert settings.console_level == logging.INFO

    def test_flag_beats_environment(self):
        settings = LogSettings.from_flags(quiet=True, environ={"TOKENFORGE_LOG_LEVEL": "DEBUG"})
        assert settings.console_level == logging.ERROR

    def test_default(self):
        settings = LogSettings.from_flags(environ={})
        assert settings.console_level == logging.WARNING
        assert settings.file is None

    def test_file_from_environment(self):
        settings = LogSettings.from_flags(
            environ={"TOKENFORGE_LOG_FILE": "/tmp/t.log", "TOKENFORGE_LOG_FILE_LEVEL": "DEBUG"}
        )
        assert settings.file == "/tmp/t.log"
        assert settings.effective_file_level == logging.DEBUG
        assert settings.root_level == logging.DEBUG

    def test_file_level_defaults_to_console(self):
        settings = LogSettings(console_level="ERROR", file="x.log")
        assert settings.effective_file_level == logging.ERROR

    def test_root_level_without_file_ignores_file_level(self):
        settings = LogSettings(console_level="ERROR", file_level="DEBUG")
        assert settings.root_level == logging.ERROR


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_console_level(self):
        setup_logging(LogSettings(console_level="INFO"))
        assert logging.getLogger().level == logging.INFO
        (console,) = _ours()
        assert console.level == logging.INFO

    def test_repeat_setup_replaces_own_handlers_only(self):
        foreign = logging.NullHandler()
        root = logging.getLogger()
        root.addHandler(foreign)
        try:
            setup_logging(LogSettings())
            setup_logging(LogSettings(console_level="DEBUG"))
            assert len(_ours()) == 1
            assert foreign in root.handlers
        finally:
            root.removeHandler(foreign)

    def test_defaults_applied(self):
        settings = setup_logging()
        assert settings.console_level == logging.WARNING
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "tokenforge.log"
        setup_logging(LogSettings(console_level="ERROR", file=str(log_file), file_level="DEBUG"))
        logging.getLogger("tokenforge.test").debug("written to file")
        for handler in _ours():
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_third_party_quieted(self):
        setup_logging(LogSettings(console_level="INFO"))
        assert logging.getLogger("werkzeug").level == logging.WARNING

    def test_console_formats_by_tier(self):
        record = logging.LogRecord("tokenforge.x", logging.WARNING, __file__, 7, "careful", None, None)
        assert console_formatter(logging.WARNING).format(record) == "WARNING: careful"
        assert "tokenforge.x:7" in console_formatter(logging.DEBUG).format(record)
        assert "tokenforge.x  careful" in console_formatter(logging.INFO).format(record)


class TestErrorFormat:
    """Tests for TokenforgeError rendering."""

    def test_format_plain(self):
        text = ConfigNotFoundError(".tokenforge/producer.json", consumer=False).format(color=False)
        assert "Error: Configuration not found" in text
        assert "Could not find .tokenforge/producer.json" in text
        assert "Suggestion: Run: tokenforge init --producer" in text

    def test_to_dict(self):
        data = GenerationFailedError("figma", "boom").to_dict()
        assert data["title"] == "Generation failed"
        assert data["detail"] == 'Generator "figma" failed: boom'
