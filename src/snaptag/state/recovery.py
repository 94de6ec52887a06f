"""Startup recovery: rebuild history and vocabulary after any shutdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from snaptag.history import RenameHistory
from snaptag.vocabulary import TagVocabulary

from . import StateRepository
from .errors import MissingStateError, StateError
from .models import RenameEvent, VocabularyEvent

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RecoveryReport:
    """Outcome of startup recovery.

    Attributes:
        history: Rename history after loading and replay.
        vocabulary: Tag vocabulary after loading and replay.
        replayed_renames: Number of rename journal lines applied.
        replayed_vocabulary: Number of vocabulary journal lines applied.
        pruned: Tracked paths dropped because the file no longer exists.
        warnings: Problems encountered while loading snapshots.
    """

    history: RenameHistory
    vocabulary: TagVocabulary
    replayed_renames: int = 0
    replayed_vocabulary: int = 0
    pruned: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def recovered_from_crash(self) -> bool:
        """Return whether any journal entries had to be replayed."""
        return bool(self.replayed_renames or self.replayed_vocabulary)


def load_history(repository: StateRepository, warnings: list[str]) -> RenameHistory:
    """Load the history snapshot, falling back to an empty history."""
    try:
        snapshot = repository.load_history()
    except MissingStateError:
        return RenameHistory()
    except StateError as exc:
        LOGGER.warning("Ignoring unreadable history snapshot: %s", exc)
        warnings.append(str(exc))
        return RenameHistory()
    return RenameHistory(snapshot.to_mapping())


def load_vocabulary(repository: StateRepository, warnings: list[str]) -> TagVocabulary:
    """Load the vocabulary snapshot, falling back to an empty vocabulary."""
    try:
        snapshot = repository.load_vocabulary()
    except MissingStateError:
        return TagVocabulary()
    except StateError as exc:
        LOGGER.warning("Ignoring unreadable vocabulary snapshot: %s", exc)
        warnings.append(str(exc))
        return TagVocabulary()
    return TagVocabulary(snapshot.tags)


def replay_renames(history: RenameHistory, events: Iterable[RenameEvent]) -> int:
    """Apply rename journal events to ``history`` in order."""
    count = 0
    for event in events:
        history.on_rename(event.source, event.destination)
        count += 1
    return count


def replay_vocabulary(vocabulary: TagVocabulary, events: Iterable[VocabularyEvent]) -> int:
    """Apply vocabulary journal events to ``vocabulary`` in order."""
    count = 0
    for event in events:
        if event.operation == "add":
            vocabulary.add(event.tag)
        else:
            vocabulary.remove(event.tag)
        count += 1
    return count


def recover(
    repository: StateRepository,
    *,
    exists: Callable[[Path], bool] = Path.exists,
) -> RecoveryReport:
    """Load durable state, replay any leftover journals, and prune stale entries.

    Must complete before the orchestrator accepts mutating operations. The
    journals themselves are left in place; they are only removed by a clean
    shutdown, so repeated crashes keep accumulating entries against the same
    snapshot.

    Args:
        repository: State repository to read from.
        exists: Predicate used to decide whether a tracked image still exists.

    Returns:
        RecoveryReport: Recovered collections and replay statistics.
    """
    warnings: list[str] = []
    history = load_history(repository, warnings)
    vocabulary = load_vocabulary(repository, warnings)
    report = RecoveryReport(history=history, vocabulary=vocabulary, warnings=warnings)

    report.replayed_renames = replay_renames(history, repository.rename_journal().events())
    report.replayed_vocabulary = replay_vocabulary(
        vocabulary, repository.vocabulary_journal().events()
    )
    if report.recovered_from_crash:
        LOGGER.info(
            "Recovered from unclean shutdown: replayed %d rename(s) and %d vocabulary edit(s).",
            report.replayed_renames,
            report.replayed_vocabulary,
        )

    report.pruned = history.prune(exists)
    if report.pruned:
        LOGGER.debug("Pruned %d missing image(s) from history.", len(report.pruned))
    return report


__all__ = [
    "RecoveryReport",
    "load_history",
    "load_vocabulary",
    "recover",
    "replay_renames",
    "replay_vocabulary",
]
