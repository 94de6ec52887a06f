"""In-memory index of the images below the current root."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from snaptag.naming import get_full_name, has_all_tags


def _display_key(path: Path) -> tuple[str, str]:
    name = get_full_name(path)
    return name.casefold(), str(path)


class PathIndex:
    """Keep ``all_paths`` and the tag-filtered ``filtered_paths`` in sync.

    Both lists are duplicate-free and sorted case-insensitively by file name.
    ``filtered_paths`` is always a subset of ``all_paths`` and equals it when
    no filter is active.
    """

    def __init__(self) -> None:
        self._root: Path | None = None
        self._linked_roots: list[Path] = []
        self._all: list[Path] = []
        self._filtered: list[Path] = []
        self._filters: list[str] = []

    @property
    def root(self) -> Path | None:
        return self._root

    @property
    def all_paths(self) -> list[Path]:
        return list(self._all)

    @property
    def filtered_paths(self) -> list[Path]:
        return list(self._filtered)

    @property
    def filters(self) -> list[str]:
        return list(self._filters)

    def reset(
        self,
        root: Path | None,
        paths: Iterable[Path] = (),
        linked_roots: Iterable[Path] = (),
    ) -> None:
        """Replace the index contents and drop every active filter.

        Args:
            root: Directory the index covers, or None to unbind.
            paths: Images found below ``root``.
            linked_roots: Real directories reached through symlinks below
                ``root``; images there count as inside the root.
        """
        self._root = root
        self._linked_roots = list(dict.fromkeys(linked_roots)) if root is not None else []
        self._filters = []
        self._all = sorted(set(paths), key=_display_key) if root is not None else []
        self._filtered = list(self._all)

    def add_filter(self, tag: str) -> None:
        """Narrow ``filtered_paths`` to images that also carry ``tag``."""
        if tag.casefold() not in {existing.casefold() for existing in self._filters}:
            self._filters.append(tag)
            self._filters.sort(key=lambda value: (value.casefold(), value))
        self._filtered = [path for path in self._filtered if has_all_tags(path, [tag])]

    def remove_filter(self, tag: str) -> None:
        """Drop ``tag`` from the filters and rebuild ``filtered_paths``.

        Removing a filter can only grow the result, so the list is rebuilt
        from ``all_paths`` rather than patched.
        """
        folded = tag.casefold()
        self._filters = [existing for existing in self._filters if existing.casefold() != folded]
        if not self._filters:
            self._filtered = list(self._all)
            return
        self._filtered = [path for path in self._all if has_all_tags(path, self._filters)]

    def replace(self, old_path: Path, new_path: Path) -> None:
        """Re-index an image after it moved from ``old_path`` to ``new_path``."""
        if self._root is None:
            return
        if old_path in self._all:
            self._all.remove(old_path)
        if old_path in self._filtered:
            self._filtered.remove(old_path)

        if not self.contains_location(new_path):
            return
        if new_path not in self._all:
            self._all.append(new_path)
            self._all.sort(key=_display_key)
        if has_all_tags(new_path, self._filters) and new_path not in self._filtered:
            self._filtered.append(new_path)
            self._filtered.sort(key=_display_key)

    def contains_location(self, path: Path) -> bool:
        """Return whether ``path`` lies below the root or a linked directory."""
        if self._root is None:
            return False
        parents = path.parents
        return any(location in parents for location in [self._root, *self._linked_roots])


__all__ = ["PathIndex"]
