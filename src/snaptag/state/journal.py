"""Append-only logs: the user-facing audit log and the two replay journals."""

from __future__ import annotations

import csv
import io
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Iterator

from pydantic import ValidationError

from .models import RenameEvent, VocabularyEvent

LOGGER = logging.getLogger(__name__)


class AppendOnlyLog:
    """Line-oriented append-only file flushed to disk after every write."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._handle: IO[str] | None = None

    @property
    def path(self) -> Path:
        """Return the location of the log file."""
        return self._path

    def append(self, line: str) -> None:
        """Write ``line`` and force it to disk before returning."""
        if self._handle is None or self._handle.closed:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._path.open("a", encoding="utf-8")
        self._handle.write(line + "\n")
        self._handle.flush()
        os.fsync(self._handle.fileno())

    def read_lines(self) -> list[str]:
        """Return every non-empty line currently on disk, in file order."""
        if not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as handle:
            return [line.rstrip("\r\n") for line in handle if line.strip()]

    def close(self) -> None:
        """Close the underlying writer if one is open."""
        if self._handle is not None and not self._handle.closed:
            self._handle.close()
        self._handle = None

    def discard(self) -> None:
        """Close the writer and delete the file."""
        self.close()
        self._path.unlink(missing_ok=True)


class AuditLog(AppendOnlyLog):
    """Human-readable, timestamped record of renames, moves, and tag edits."""

    def record_update(self, source: Path, destination: Path) -> None:
        """Describe a rename or move of an image."""
        if source.parent != destination.parent:
            self._write("MOVE", f'"{source}" -> "{destination}"')
        else:
            self._write("RENAME", f'"{source.name}" -> "{destination.name}" in "{source.parent}"')

    def record_tag_added(self, tag: str) -> None:
        self._write("TAG_ADDED", tag)

    def record_tag_removed(self, tag: str) -> None:
        self._write("TAG_REMOVED", tag)

    def record_failure(self, message: str) -> None:
        self._write("FAILED", message)

    def read_text(self) -> str:
        """Return the log verbatim for display."""
        if not self._path.exists():
            return ""
        return self._path.read_text(encoding="utf-8")

    def _write(self, event: str, details: str) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        self.append(f"[{timestamp}] {event} {details}")


class RenameJournal(AppendOnlyLog):
    """Replay journal of successful renames as ``oldPath,newPath`` lines.

    Paths containing a comma or quote are CSV-quoted.
    """

    def record(self, source: Path, destination: Path) -> None:
        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="").writerow([str(source), str(destination)])
        self.append(buffer.getvalue())

    def events(self) -> Iterator[RenameEvent]:
        """Yield journal entries in file order, skipping malformed lines."""
        for number, line in enumerate(self.read_lines(), start=1):
            fields = next(csv.reader([line]), [])
            if len(fields) != 2 or not all(fields):
                LOGGER.warning("Skipping malformed rename journal line %d: %r", number, line)
                continue
            yield RenameEvent(source=Path(fields[0]), destination=Path(fields[1]))


class VocabularyJournal(AppendOnlyLog):
    """Replay journal of vocabulary edits as ``add:<tag>`` / ``remove:<tag>`` lines."""

    def record(self, operation: str, tag: str) -> None:
        self.append(f"{operation}:{tag}")

    def events(self) -> Iterator[VocabularyEvent]:
        """Yield journal entries in file order, skipping malformed lines."""
        for number, line in enumerate(self.read_lines(), start=1):
            operation, separator, tag = line.partition(":")
            if not separator or not tag:
                LOGGER.warning("Skipping malformed vocabulary journal line %d: %r", number, line)
                continue
            try:
                event = VocabularyEvent(operation=operation, tag=tag)  # type: ignore[arg-type]
            except ValidationError:
                LOGGER.warning("Skipping unknown vocabulary journal operation %d: %r", number, line)
                continue
            yield event


__all__ = ["AppendOnlyLog", "AuditLog", "RenameJournal", "VocabularyJournal"]
