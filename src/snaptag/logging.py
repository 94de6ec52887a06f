"""Diagnostic logging setup for snaptag."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from snaptag.config import LoggingSettings

_FORMAT = "[%(asctime)s] %(name)s %(levelname)s: %(message)s"
_HANDLER_NAME = "snaptag-diagnostics"


def configure_logging(settings: LoggingSettings, log_path: Path) -> logging.Handler:
    """Attach a rotating file handler for the ``snaptag`` logger hierarchy.

    Calling this again replaces the previously installed handler, so the CLI
    can reconfigure logging between invocations in the same process.

    Args:
        settings: Level and rotation limits.
        log_path: Diagnostic log file; its parent directory is created.

    Returns:
        logging.Handler: The installed handler.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)
    level = logging.getLevelName(settings.level)

    logger = logging.getLogger("snaptag")
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)
            existing.close()

    handler = RotatingFileHandler(
        log_path,
        maxBytes=max(settings.max_size_mb, 1) * 1024 * 1024,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


__all__ = ["configure_logging"]
