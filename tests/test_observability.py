"""
Tests for logging setup and the user-facing reporter.
"""

import logging
from pathlib import Path

from devinit.core.observability.logging_config import resolve_level, setup_logging
from devinit.core.observability.reporter import (
    RecordingSink,
    Reporter,
    click_sink,
    debug_enabled_from_env,
)

# ── Logging ──────────────────────────────────────────────────────────


class TestResolveLevel:
    def test_precedence(self):
        assert resolve_level(debug=True, verbose=True, quiet=True) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True) == "INFO"
        assert resolve_level(quiet=True, env_level="DEBUG") == "ERROR"
        assert resolve_level(env_level="INFO") == "INFO"
        assert resolve_level() == "WARNING"


class TestSetupLogging:
    def test_console_level(self):
        setup_logging(level="INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_invalid_level_falls_back(self):
        setup_logging(level="NOPE")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "devinit.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("devinit.test").debug("to file only")
        for handler in root.handlers:
            handler.flush()
        assert "to file only" in log_file.read_text()
        for handler in list(root.handlers):
            handler.close()
            root.removeHandler(handler)

    def test_third_party_quieted(self):
        setup_logging(level="INFO")
        assert logging.getLogger("urllib3").level == logging.WARNING


# ── Reporter ─────────────────────────────────────────────────────────


class TestReporter:
    def test_five_levels(self):
        sink = RecordingSink()
        r = Reporter(debug=True, sink=sink)
        r.info("i")
        r.success("s")
        r.warning("w")
        r.error("e")
        r.debug("d")
        assert sink.lines == [
            ("info", "i"), ("success", "s"), ("warning", "w"), ("error", "e"), ("debug", "d"),
        ]

    def test_debug_gated(self):
        sink = RecordingSink()
        Reporter(debug=False, sink=sink).debug("hidden")
        assert sink.lines == []

    def test_blank_not_recorded(self):
        sink = RecordingSink()
        Reporter(sink=sink).blank()
        assert sink.lines == []

    def test_messages_filter(self):
        sink = RecordingSink()
        r = Reporter(sink=sink)
        r.info("a")
        r.error("b")
        assert sink.messages("error") == ["b"]
        assert sink.messages() == ["a", "b"]

    def test_click_sink_format(self, capsys):
        click_sink("info", "hello")
        click_sink("error", "bad")
        captured = capsys.readouterr()
        assert "[INFO] hello" in captured.out
        assert "[ERROR] bad" in captured.err

    def test_debug_from_env(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "1")
        assert debug_enabled_from_env()
        monkeypatch.setenv("DEBUG", "0")
        assert not debug_enabled_from_env()
        monkeypatch.delenv("DEBUG")
        assert not debug_enabled_from_env()
