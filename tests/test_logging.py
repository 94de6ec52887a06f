"""Diagnostic logging setup tests."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from snaptag.config import LoggingSettings
from snaptag.logging import configure_logging


def test_configure_logging_writes_rotating_file(tmp_path: Path) -> None:
    log_path = tmp_path / "state" / "snaptag.log"
    settings = LoggingSettings(level="info", max_size_mb=2, backup_count=4)

    handler = configure_logging(settings, log_path)
    try:
        logging.getLogger("snaptag.tests").info("hello from the test")
        handler.flush()

        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 2 * 1024 * 1024
        assert handler.backupCount == 4
        assert "hello from the test" in log_path.read_text(encoding="utf-8")
    finally:
        logging.getLogger("snaptag").removeHandler(handler)
        handler.close()


def test_reconfiguring_replaces_previous_handler(tmp_path: Path) -> None:
    first = configure_logging(LoggingSettings(), tmp_path / "one.log")
    second = configure_logging(LoggingSettings(level="ERROR"), tmp_path / "two.log")
    try:
        handlers = logging.getLogger("snaptag").handlers

        assert second in handlers
        assert first not in handlers
        assert logging.getLogger("snaptag").level == logging.ERROR
    finally:
        logging.getLogger("snaptag").removeHandler(second)
        second.close()
