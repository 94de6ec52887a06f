"""Session factory wiring configuration, recovery, and the tagging manager."""

from __future__ import annotations

import logging
from pathlib import Path

from snaptag.config import SnaptagConfig
from snaptag.ingestion import DirectoryScanner
from snaptag.organization import TaggingManager
from snaptag.state import StateRepository
from snaptag.state.recovery import recover

LOGGER = logging.getLogger(__name__)


def open_session(
    config: SnaptagConfig | None = None,
    *,
    state_dir: Path | str | None = None,
) -> TaggingManager:
    """Recover durable state and return a ready tagging manager.

    Recovery (snapshot load, journal replay, pruning) finishes before the
    manager is constructed. The caller owns the returned manager and must
    close it, typically with a ``with`` block.

    Args:
        config: Effective configuration; defaults are used when omitted.
        state_dir: Overrides ``config.storage.state_dir``.

    Returns:
        TaggingManager: Manager bound to no directory yet.
    """
    config = config or SnaptagConfig()
    repository = StateRepository(state_dir or config.storage.state_dir)
    repository.initialize()

    report = recover(repository)
    for warning in report.warnings:
        LOGGER.warning("Recovery: %s", warning)

    scanner = DirectoryScanner(
        extensions=config.scanning.extensions,
        include_hidden=config.scanning.include_hidden,
        follow_symlinks=config.scanning.follow_symlinks,
    )
    return TaggingManager(
        repository,
        report.history,
        report.vocabulary,
        scanner=scanner,
        recovery=report,
    )


__all__ = ["open_session"]
