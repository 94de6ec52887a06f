"""Durable state records and replay journal events."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

SNAPSHOT_VERSION = 1


class SnapshotRecord(BaseModel):
    """Common envelope for every snapshot written to disk.

    Attributes:
        version: Record format version; readers reject versions they do not know.
        saved_at: Time the snapshot was written.
    """

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = SNAPSHOT_VERSION
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class HistorySnapshot(SnapshotRecord):
    """Serialized rename history: current path to former full names."""

    entries: Dict[str, List[str]] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, entries: Dict[Path, List[str]]) -> "HistorySnapshot":
        return cls(entries={str(path): list(names) for path, names in entries.items()})

    def to_mapping(self) -> Dict[Path, List[str]]:
        return {Path(path): list(names) for path, names in self.entries.items()}


class VocabularySnapshot(SnapshotRecord):
    """Serialized master tag vocabulary."""

    tags: List[str] = Field(default_factory=list)


class RenameEvent(BaseModel):
    """One line of the rename journal."""

    source: Path
    destination: Path


class VocabularyEvent(BaseModel):
    """One line of the vocabulary journal."""

    operation: Literal["add", "remove"]
    tag: str


__all__ = [
    "SNAPSHOT_VERSION",
    "SnapshotRecord",
    "HistorySnapshot",
    "VocabularySnapshot",
    "RenameEvent",
    "VocabularyEvent",
]
