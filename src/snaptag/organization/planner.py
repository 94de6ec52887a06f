"""Collision-free destination planning for renames and moves."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from snaptag.naming import get_base_name, rename

from .models import RenameOperation

COPY_LABEL = "copy"


def resolve_collision(
    source: Path,
    candidate: Path,
    *,
    exists: Callable[[Path], bool] = Path.exists,
) -> tuple[Path, bool]:
    """Return a destination for ``source`` that does not clash with an existing file.

    The base name of ``candidate`` is suffixed with ``" copy"``, then
    ``" copy 1"``, ``" copy 2"``, ... until the path is free. Tags and
    extension are preserved. A suffixed name that turns out to be ``source``
    itself counts as free.

    Args:
        source: Current path of the image.
        candidate: Requested destination.
        exists: Predicate reporting whether a path is already taken.

    Returns:
        tuple[Path, bool]: The resolved destination and whether a suffix was applied.
    """
    if candidate == source:
        return candidate, False

    base = get_base_name(candidate)
    final_candidate = candidate
    counter = 0
    while final_candidate != source and exists(final_candidate):
        label = f"{base} {COPY_LABEL}" if counter == 0 else f"{base} {COPY_LABEL} {counter}"
        final_candidate = rename(candidate, label)
        counter += 1

    return final_candidate, final_candidate != candidate


class RenamePlanner:
    """Turn a requested destination into a concrete rename operation."""

    def __init__(self, *, exists: Callable[[Path], bool] = Path.exists) -> None:
        self._exists = exists

    def plan(self, source: Path, candidate: Path) -> RenameOperation | None:
        """Return the operation needed to move ``source`` to ``candidate``.

        Returns:
            RenameOperation | None: None when the resolved destination is the
            source itself, i.e. the request is a no-op.
        """
        destination, conflict_applied = resolve_collision(source, candidate, exists=self._exists)
        if destination == source:
            return None
        return RenameOperation(
            source=source,
            destination=destination,
            conflict_applied=conflict_applied,
        )


__all__ = ["COPY_LABEL", "RenamePlanner", "resolve_collision"]
