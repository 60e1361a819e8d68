"""Tests for svg2pdc.utils.logging_config.

Covers handler installation and replacement, the human and JSON formats,
context fields, rotation and level validation.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from pathlib import Path

import pytest

from svg2pdc.utils.logging_config import (
    ContextFormatter,
    pop_context,
    push_context,
    reset_logging,
    setup_logging,
)


def _record(msg: str, level: int = logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord("svg2pdc.test", level, __file__, 1, msg, None, None)


def _context() -> dict[str, object]:
    entry = json.loads(ContextFormatter("json").format(_record("x")))
    return {k: v for k, v in entry.items() if k not in ("t", "lvl", "name", "msg")}


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------


class TestContextFormatter:
    def test_human_format(self) -> None:
        push_context(file="icon.svg")
        line = ContextFormatter("human", use_color=False).format(_record("Skipping"))
        ts, level, context, msg = (part.strip() for part in line.split("|"))
        assert ts.endswith("Z")
        assert level == "WARNING"
        assert context == "file=icon.svg"
        assert msg == "Skipping"

    def test_human_without_context(self) -> None:
        line = ContextFormatter("human", use_color=False).format(_record("hello"))
        assert line.count("|") == 2

    def test_json_format(self) -> None:
        push_context(case="shapes")
        entry = json.loads(ContextFormatter("json").format(_record("done", logging.INFO)))
        assert entry["lvl"] == "INFO"
        assert entry["name"] == "svg2pdc.test"
        assert entry["msg"] == "done"
        assert entry["case"] == "shapes"

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError, match="format mode"):
            ContextFormatter("xml")


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class TestContext:
    def test_push_and_pop_keys(self) -> None:
        push_context(app="svg2pdc", file="a.svg")
        push_context(file="b.svg")
        assert _context() == {"app": "svg2pdc", "file": "b.svg"}
        pop_context(keys=["file"])
        assert _context() == {"app": "svg2pdc"}
        pop_context()
        assert _context() == {}

    def test_pop_unknown_key(self) -> None:
        push_context(app="svg2pdc")
        pop_context(keys=["file"])
        assert _context() == {"app": "svg2pdc"}


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


class TestSetupLogging:
    def test_installs_console_handler(self) -> None:
        handlers = setup_logging("DEBUG", capture_warnings=False)
        assert len(handlers) == 1
        assert handlers[0] in logging.getLogger().handlers
        assert logging.getLogger().level == logging.DEBUG

    def test_reconfigure_replaces_own_handlers_only(self) -> None:
        foreign = logging.NullHandler()
        root = logging.getLogger()
        root.addHandler(foreign)
        try:
            first = setup_logging(capture_warnings=False)
            second = setup_logging(capture_warnings=False)
            assert first[0] not in root.handlers
            assert second[0] in root.handlers
            assert foreign in root.handlers
        finally:
            root.removeHandler(foreign)

    def test_reset_logging(self) -> None:
        handlers = setup_logging(capture_warnings=False)
        reset_logging()
        assert not set(handlers) & set(logging.getLogger().handlers)

    def test_file_handler_human(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "convert.log"
        setup_logging(log_file=str(log_file), to_stderr=False, capture_warnings=False,
                      context={"app": "svg2pdc"})
        logging.getLogger("svg2pdc.test").info("Wrote icon.pdc")
        reset_logging()
        text = log_file.read_text(encoding="utf-8")
        assert "| INFO     | app=svg2pdc | Wrote icon.pdc" in text

    def test_file_handler_json(self, tmp_path: Path) -> None:
        log_file = tmp_path / "convert.jsonl"
        setup_logging(log_file=str(log_file), json=True, to_stderr=False, capture_warnings=False)
        logging.getLogger("svg2pdc.test").warning("Skipping unsupported tag: %s", "text")
        reset_logging()
        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["msg"] == "Skipping unsupported tag: text"

    def test_rotating_file_handler(self, tmp_path: Path) -> None:
        handlers = setup_logging(
            log_file=str(tmp_path / "convert.log"),
            to_stderr=False,
            rotate={"max_bytes": 1024, "backup_count": 2},
            capture_warnings=False,
        )
        (handler,) = handlers
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 1024
        assert handler.backupCount == 2

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging("LOUD")
