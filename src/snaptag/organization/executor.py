"""Executor for planned renames."""

from __future__ import annotations

import shutil

from .models import RenameOperation


class RenameExecutor:
    """Apply rename operations to the file system."""

    def apply(self, operation: RenameOperation) -> None:
        """Rename or move the file described by ``operation``.

        Raises:
            FileNotFoundError: If the source file no longer exists.
            FileExistsError: If the destination appeared after planning.
            OSError: For any other file-system failure.
        """
        source = operation.source
        destination = operation.destination
        if not source.exists():
            raise FileNotFoundError(f"Source path is missing: {source}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        if destination.exists():
            raise FileExistsError(f"Destination already exists: {destination}")
        shutil.move(str(source), str(destination))


__all__ = ["RenameExecutor"]
