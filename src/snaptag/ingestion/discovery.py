"""Image discovery below a root directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from snaptag.naming import IMAGE_EXTENSIONS, is_image

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Images found during a scan plus any subtrees that could not be read.

    Attributes:
        root: Directory that was scanned.
        images: Image paths in discovery order.
        errors: Human-readable descriptions of unreadable directories.
        linked_roots: Resolved targets of symlinked directories that were followed.
    """

    root: Path
    images: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    linked_roots: list[Path] = field(default_factory=list)


class DirectoryScanner:
    """Recursively discover image files, matching by extension only."""

    def __init__(
        self,
        *,
        extensions: Iterable[str] = IMAGE_EXTENSIONS,
        include_hidden: bool = True,
        follow_symlinks: bool = False,
    ) -> None:
        self.extensions = tuple(extensions)
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks

    def scan(self, root: Path) -> ScanResult:
        """Return every image at or below ``root``.

        A directory that cannot be listed aborts only its own subtree; the
        images collected elsewhere are kept and the failure is recorded. Image
        paths are reported below their resolved directory, so an image reached
        through a symlinked directory is listed once under its real location.
        """
        root = Path(root).expanduser().resolve()
        result = ScanResult(root=root)
        if not root.is_dir():
            result.errors.append(f"{root}: not a directory")
            LOGGER.warning("Cannot scan %s: not a directory", root)
            return result
        self._walk(root, result, set())
        return result

    def _walk(self, directory: Path, result: ScanResult, visited: set[Path]) -> None:
        # Symlinked directories can form cycles.
        resolved = directory.resolve()
        if resolved in visited:
            return
        visited.add(resolved)
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            result.errors.append(f"{directory}: {exc}")
            LOGGER.warning("Skipping unreadable directory %s: %s", directory, exc)
            return

        for entry in entries:
            if not self.include_hidden and entry.name.startswith("."):
                continue
            if entry.is_symlink() and not self.follow_symlinks:
                continue
            try:
                is_directory = entry.is_dir()
            except OSError:
                continue
            if is_directory:
                if entry.is_symlink():
                    result.linked_roots.append(entry.resolve())
                self._walk(entry, result, visited)
            elif is_image(entry, self.extensions):
                result.images.append(resolved / entry.name)


__all__ = ["DirectoryScanner", "ScanResult"]
