"""Durable state and crash-recovery logs for snaptag."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from .errors import MissingStateError, StateError, UnsupportedStateVersionError
from .journal import AppendOnlyLog, AuditLog, RenameJournal, VocabularyJournal
from .models import (
    SNAPSHOT_VERSION,
    HistorySnapshot,
    RenameEvent,
    SnapshotRecord,
    VocabularyEvent,
    VocabularySnapshot,
)

DEFAULT_STATE_DIR = Path("~/.snaptag")
HISTORY_FILENAME = "history.json"
VOCABULARY_FILENAME = "vocabulary.json"
AUDIT_LOG_FILENAME = "audit.log"
RENAME_JOURNAL_FILENAME = "renames.journal"
VOCABULARY_JOURNAL_FILENAME = "vocabulary.journal"
DIAGNOSTIC_LOG_FILENAME = "snaptag.log"

_Record = TypeVar("_Record", bound=SnapshotRecord)


class StateRepository:
    """Manage the files that make up snaptag's durable state.

    The state directory holds two versioned snapshots (history and vocabulary),
    the user-facing audit log, and the two replay journals consumed by startup
    recovery after an unclean shutdown.
    """

    def __init__(self, state_dir: Path | str = DEFAULT_STATE_DIR) -> None:
        """Initialize the repository.

        Args:
            state_dir: Directory that stores state artifacts.
        """
        self._state_dir = Path(state_dir).expanduser()

    @property
    def state_dir(self) -> Path:
        """Return the directory that stores state artifacts."""
        return self._state_dir

    def initialize(self) -> Path:
        """Create the state directory if needed and return it."""
        self._state_dir.mkdir(parents=True, exist_ok=True)
        return self._state_dir

    def load_history(self) -> HistorySnapshot:
        """Load the rename history snapshot.

        Raises:
            MissingStateError: If no snapshot has been written.
            StateError: If the snapshot cannot be read or has an unknown version.
        """
        return self._load(self._state_dir / HISTORY_FILENAME, HistorySnapshot)

    def load_vocabulary(self) -> VocabularySnapshot:
        """Load the vocabulary snapshot.

        Raises:
            MissingStateError: If no snapshot has been written.
            StateError: If the snapshot cannot be read or has an unknown version.
        """
        return self._load(self._state_dir / VOCABULARY_FILENAME, VocabularySnapshot)

    def save_history(self, snapshot: HistorySnapshot) -> None:
        """Atomically persist the rename history snapshot."""
        self._save(self._state_dir / HISTORY_FILENAME, snapshot)

    def save_vocabulary(self, snapshot: VocabularySnapshot) -> None:
        """Atomically persist the vocabulary snapshot."""
        self._save(self._state_dir / VOCABULARY_FILENAME, snapshot)

    def audit_log(self) -> AuditLog:
        return AuditLog(self._state_dir / AUDIT_LOG_FILENAME)

    def rename_journal(self) -> RenameJournal:
        return RenameJournal(self._state_dir / RENAME_JOURNAL_FILENAME)

    def vocabulary_journal(self) -> VocabularyJournal:
        return VocabularyJournal(self._state_dir / VOCABULARY_JOURNAL_FILENAME)

    @property
    def diagnostic_log_path(self) -> Path:
        return self._state_dir / DIAGNOSTIC_LOG_FILENAME

    def _load(self, path: Path, model: type[_Record]) -> _Record:
        if not path.exists():
            raise MissingStateError(f"No snapshot found at {path}")

        try:
            data: Any = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise StateError(f"Unable to read {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StateError(f"Invalid snapshot data in {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StateError(f"Snapshot {path} must contain a JSON object.")
        version = data.get("version")
        if version != SNAPSHOT_VERSION:
            raise UnsupportedStateVersionError(
                f"Snapshot {path} has version {version!r}; expected {SNAPSHOT_VERSION}."
            )

        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise StateError(f"Invalid snapshot data in {path}: {exc}") from exc

    def _save(self, path: Path, snapshot: SnapshotRecord) -> None:
        snapshot.saved_at = datetime.now(timezone.utc)
        payload = json.dumps(snapshot.model_dump(mode="json"), indent=2, sort_keys=False)
        temporary = path.with_name(path.name + ".tmp")
        try:
            self.initialize()
            with temporary.open("w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temporary, path)
        except OSError as exc:
            if temporary.exists():
                temporary.unlink()
            raise StateError(f"Unable to write snapshot {path}: {exc}") from exc


__all__ = [
    "StateRepository",
    "DEFAULT_STATE_DIR",
    "AppendOnlyLog",
    "AuditLog",
    "RenameJournal",
    "VocabularyJournal",
    "HistorySnapshot",
    "VocabularySnapshot",
    "RenameEvent",
    "VocabularyEvent",
    "SNAPSHOT_VERSION",
    "StateError",
    "MissingStateError",
    "UnsupportedStateVersionError",
]
