"""Tagging orchestration: path index, collision handling, and renames."""

from .executor import RenameExecutor
from .index import PathIndex
from .manager import TaggingManager
from .models import FailureReason, ImageUpdate, RenameOperation, UpdateStatus
from .planner import COPY_LABEL, RenamePlanner, resolve_collision

__all__ = [
    "COPY_LABEL",
    "FailureReason",
    "ImageUpdate",
    "PathIndex",
    "RenameExecutor",
    "RenameOperation",
    "RenamePlanner",
    "TaggingManager",
    "UpdateStatus",
    "resolve_collision",
]
