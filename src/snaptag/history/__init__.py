"""Per-image rename history keyed by the image's current path."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Mapping

from snaptag.naming import get_full_name


class RenameHistory:
    """Track the former full names of images as they are renamed and moved."""

    def __init__(self, entries: Mapping[Path, Iterable[str]] | None = None) -> None:
        """Initialize the tracker from an optional snapshot.

        Args:
            entries: Mapping of current image paths to their former names.
        """
        self._entries: dict[Path, list[str]] = {}
        for path, names in (entries or {}).items():
            self._entries[Path(path)] = list(dict.fromkeys(names))

    def on_rename(self, old_path: Path, new_path: Path) -> None:
        """Record that the image at ``old_path`` now lives at ``new_path``.

        A tracked entry is re-keyed to the new path. The old full name is
        appended only when the name itself changed; a pure move never adds a
        name. Any entry already stored under ``new_path`` is discarded.

        Args:
            old_path: Path of the image before the rename.
            new_path: Path of the image after the rename.
        """
        old_path = Path(old_path)
        new_path = Path(new_path)
        old_name = get_full_name(old_path)
        name_changed = old_name != get_full_name(new_path)

        if old_path in self._entries:
            names = self._entries.pop(old_path)
        elif name_changed:
            names = []
        else:
            self._entries.pop(new_path, None)
            return

        if name_changed and old_name not in names:
            names.append(old_name)
        self._entries[new_path] = names

    def track(self, path: Path) -> None:
        """Ensure ``path`` is tracked, with an empty history if it is new."""
        self._entries.setdefault(Path(path), [])

    def untrack(self, path: Path) -> None:
        """Stop tracking ``path``; unknown paths are ignored."""
        self._entries.pop(Path(path), None)

    def history_of(self, path: Path) -> list[str]:
        """Return the former names of ``path``, oldest first."""
        return list(self._entries.get(Path(path), []))

    def tracked_paths(self) -> set[Path]:
        """Return every tracked path, including those with an empty history."""
        return set(self._entries)

    def prune(self, exists: Callable[[Path], bool]) -> list[Path]:
        """Untrack every path for which ``exists`` returns False.

        Returns:
            list[Path]: Paths that were removed.
        """
        missing = [path for path in self._entries if not exists(path)]
        for path in missing:
            del self._entries[path]
        return missing

    def snapshot(self) -> dict[Path, list[str]]:
        """Return a deep copy of the tracked entries."""
        return {path: list(names) for path, names in self._entries.items()}

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and Path(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["RenameHistory"]
