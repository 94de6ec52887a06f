"""Result models for image tagging operations."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel

UpdateStatus = Literal["renamed", "unchanged", "failed"]
FailureReason = Literal["invalid_tag", "invalid_name", "missing_source", "filesystem_error"]


class RenameOperation(BaseModel):
    """A single file-system rename or move.

    Attributes:
        source: Current path of the image.
        destination: Collision-free target path.
        conflict_applied: Whether the destination differs from the requested name.
    """

    source: Path
    destination: Path
    conflict_applied: bool = False


class ImageUpdate(BaseModel):
    """Outcome of a mutating operation on a single image.

    Attributes:
        source: Path of the image before the operation.
        path: Path of the image afterwards; equals ``source`` unless renamed.
        status: Whether the file was renamed, left alone, or the operation failed.
        reason: Failure category when ``status`` is ``"failed"``.
        conflict_applied: Whether a " copy" suffix was added to avoid a collision.
        message: Optional human-readable detail for failures.
    """

    source: Path
    path: Path
    status: UpdateStatus
    reason: Optional[FailureReason] = None
    conflict_applied: bool = False
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    @property
    def changed(self) -> bool:
        return self.status == "renamed"

    @classmethod
    def unchanged(cls, source: Path) -> "ImageUpdate":
        return cls(source=source, path=source, status="unchanged")

    @classmethod
    def failed(cls, source: Path, reason: FailureReason, message: str) -> "ImageUpdate":
        return cls(source=source, path=source, status="failed", reason=reason, message=message)


__all__ = ["FailureReason", "ImageUpdate", "RenameOperation", "UpdateStatus"]
