"""Tagging orchestrator: the single owner of on-disk renames."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType
from typing import Collection, Iterable, Optional

from snaptag import naming
from snaptag.history import RenameHistory
from snaptag.ingestion import DirectoryScanner, ScanResult
from snaptag.state import HistorySnapshot, StateRepository, VocabularySnapshot
from snaptag.state.recovery import RecoveryReport
from snaptag.vocabulary import TagVocabulary

from .executor import RenameExecutor
from .index import PathIndex
from .models import FailureReason, ImageUpdate
from .planner import RenamePlanner

LOGGER = logging.getLogger(__name__)


def _normalize_image(path: Path | str) -> Path:
    candidate = Path(path).expanduser()
    return candidate.parent.resolve() / candidate.name


def _invalid_name(name: str) -> bool:
    separators = {os.sep, "/"} | ({os.altsep} if os.altsep else set())
    return not name.strip() or "\0" in name or any(sep in name for sep in separators)


class TaggingManager:
    """Keep the file system, the path index, history, and vocabulary consistent.

    Every mutating operation computes a new name with the naming codec,
    resolves collisions, renames the file, appends to the audit log and the
    rename journal, then updates the history tracker and the path index, in
    that order. Operations never raise for expected failures; they return an
    :class:`ImageUpdate` describing what happened.
    """

    def __init__(
        self,
        repository: StateRepository,
        history: RenameHistory,
        vocabulary: TagVocabulary,
        *,
        scanner: DirectoryScanner | None = None,
        planner: RenamePlanner | None = None,
        executor: RenameExecutor | None = None,
        recovery: RecoveryReport | None = None,
    ) -> None:
        """Initialize the manager with recovered state.

        Args:
            repository: State repository owning the logs and snapshots.
            history: Rename history produced by startup recovery.
            vocabulary: Tag vocabulary produced by startup recovery.
            scanner: Directory scanner used when the root changes.
            planner: Collision-resolving rename planner.
            executor: Executor that performs the file-system renames.
            recovery: Report from the startup recovery that produced the state.
        """
        self._repository = repository
        self._history = history
        self._vocabulary = vocabulary
        self._scanner = scanner or DirectoryScanner()
        self._planner = planner or RenamePlanner()
        self._executor = executor or RenameExecutor()
        self._index = PathIndex()
        self._audit = repository.audit_log()
        self._rename_journal = repository.rename_journal()
        self._vocabulary_journal = repository.vocabulary_journal()
        self._recovery = recovery
        self._closed = False

    # ------------------------------------------------------------------ #
    # Directory and index                                                #
    # ------------------------------------------------------------------ #

    @property
    def recovery(self) -> RecoveryReport | None:
        return self._recovery

    @property
    def current_directory(self) -> Path | None:
        """Return the bound root directory, or None when unbound."""
        return self._index.root

    def change_directory(self, directory: Path | str | None) -> ScanResult | None:
        """Bind to ``directory`` and rescan it, or unbind when given None.

        Images that already carry tags are tracked in the history and their
        tags absorbed into the vocabulary, so tags applied outside snaptag are
        picked up.

        Returns:
            ScanResult | None: Scan outcome, or None when unbinding.
        """
        self._ensure_open()
        if directory is None:
            self._index.reset(None)
            return None

        result = self._scanner.scan(Path(directory))
        for image in result.images:
            if naming.contains_tag(image):
                self._history.track(image)
                self._register_tags(naming.get_tags(image))
        self._index.reset(result.root, result.images, result.linked_roots)
        LOGGER.debug("Indexed %d image(s) below %s", len(result.images), result.root)
        return result

    def image_paths(self) -> list[Path]:
        """Return the images below the root that satisfy every active filter."""
        return self._index.filtered_paths

    def all_image_paths(self) -> list[Path]:
        """Return every image below the root, ignoring filters."""
        return self._index.all_paths

    def tag_filters(self) -> list[str]:
        return self._index.filters

    def add_tag_filter(self, tag: str) -> bool:
        """Only list images carrying ``tag`` (in addition to existing filters)."""
        if not naming.is_valid_tag(tag):
            return False
        self._index.add_filter(tag)
        return True

    def remove_tag_filter(self, tag: str) -> None:
        self._index.remove_filter(tag)

    # ------------------------------------------------------------------ #
    # Image editing                                                      #
    # ------------------------------------------------------------------ #

    def add_tag_to_image(self, path: Path | str, tag: str) -> ImageUpdate:
        """Add ``tag`` to the image's name and register it in the vocabulary."""
        source = _normalize_image(path)
        if not naming.is_valid_tag(tag):
            return ImageUpdate.failed(source, "invalid_tag", f"Invalid tag {tag!r}.")
        update = self._update(source, naming.add_tag(source, tag))
        if update.ok:
            self._register_tags([tag])
        return update

    def remove_tag_from_image(self, path: Path | str, tag: str) -> ImageUpdate:
        """Remove ``tag`` from the image's name."""
        source = _normalize_image(path)
        if not naming.is_valid_tag(tag):
            return ImageUpdate.failed(source, "invalid_tag", f"Invalid tag {tag!r}.")
        return self._update(source, naming.remove_tag(source, tag))

    def rename_image(self, path: Path | str, new_base_name: str) -> ImageUpdate:
        """Replace the image's base name, keeping its tags and extension."""
        source = _normalize_image(path)
        if _invalid_name(new_base_name):
            return ImageUpdate.failed(source, "invalid_name", f"Invalid name {new_base_name!r}.")
        update = self._update(source, naming.rename(source, new_base_name))
        if update.ok:
            self._register_tags(naming.get_tags(update.path))
        return update

    def move_image(self, path: Path | str, new_directory: Path | str) -> ImageUpdate:
        """Move the image to ``new_directory`` without changing its name."""
        source = _normalize_image(path)
        if not str(new_directory).strip():
            return ImageUpdate.failed(source, "invalid_name", "Destination directory is empty.")
        directory = Path(new_directory).expanduser().resolve()
        return self._update(source, naming.move(source, directory))

    def revert_to_old_name(self, path: Path | str, full_name: str) -> ImageUpdate:
        """Rename the image to a previously recorded full name (tags included)."""
        source = _normalize_image(path)
        if _invalid_name(full_name) or full_name.rfind(naming.EXTENSION_SEPARATOR) <= 0:
            return ImageUpdate.failed(source, "invalid_name", f"Invalid full name {full_name!r}.")
        if not naming.is_image(full_name, self._scanner.extensions):
            return ImageUpdate.failed(
                source, "invalid_name", f"{full_name!r} does not have an image extension."
            )
        update = self._update(source, naming.rename_full_name(source, full_name))
        if update.ok:
            self._register_tags(naming.get_tags(update.path))
        return update

    # ------------------------------------------------------------------ #
    # Image queries                                                      #
    # ------------------------------------------------------------------ #

    def images_directory(self, path: Path | str) -> Path:
        return naming.get_directory(path)

    def images_name(self, path: Path | str) -> str:
        return naming.get_base_name(path)

    def images_tags(self, path: Path | str) -> list[str]:
        return naming.get_tags(path)

    def tags_of_images(self, paths: Iterable[Path | str]) -> list[str]:
        """Return the sorted union of the tags carried by ``paths``."""
        merged: dict[str, str] = {}
        for path in paths:
            for tag in naming.get_tags(path):
                merged.setdefault(tag.casefold(), tag)
        return sorted(merged.values(), key=lambda tag: (tag.casefold(), tag))

    def tags_all_images_contain(
        self,
        tags: Iterable[str],
        images: Collection[Path | str],
    ) -> list[str]:
        """Return the subset of ``tags`` carried by every image in ``images``."""
        return [tag for tag in tags if all(naming.has_tag(image, tag) for image in images)]

    def images_history(self, path: Path | str) -> list[str]:
        """Return the image's former full names, oldest first."""
        return self._history.history_of(_normalize_image(path))

    def available_tags_for_image(self, path: Path | str) -> list[str]:
        """Return vocabulary tags the image does not carry yet."""
        return self._vocabulary.list(exclude=naming.get_tags(path))

    # ------------------------------------------------------------------ #
    # Vocabulary                                                         #
    # ------------------------------------------------------------------ #

    def vocabulary_tags(
        self,
        exclude: Collection[str] = (),
        must_contain: str = "",
    ) -> list[str]:
        return self._vocabulary.list(exclude=exclude, must_contain=must_contain)

    def add_vocabulary_tag(self, tag: str) -> bool:
        """Add ``tag`` to the vocabulary; returns False for invalid or known tags."""
        self._ensure_open()
        if not naming.is_valid_tag(tag):
            return False
        return bool(self._register_tags([tag]))

    def remove_vocabulary_tag(self, tag: str) -> bool:
        """Remove ``tag`` from the vocabulary without touching any image."""
        self._ensure_open()
        if not self._vocabulary.remove(tag):
            return False
        self._journal_vocabulary("remove", tag)
        return True

    def purge_tag(self, tag: str) -> list[ImageUpdate] | None:
        """Remove ``tag`` from every tracked image and then from the vocabulary.

        Matching ignores case, so every spelling of the tag is stripped from
        the images and the stored spelling is dropped from the vocabulary.

        Returns:
            list[ImageUpdate] | None: Results for the images that carried the
            tag, or None when the vocabulary does not know ``tag``.
        """
        self._ensure_open()
        known = self._vocabulary.find(tag)
        if known is None:
            return None
        wanted = known.casefold()
        updates: list[ImageUpdate] = []
        for image in sorted(self._history.tracked_paths()):
            current = image
            for spelling in naming.parse_name(image.name).tags:
                if spelling.casefold() != wanted:
                    continue
                update = self.remove_tag_from_image(current, spelling)
                updates.append(update)
                if not update.ok:
                    break
                current = update.path
        self.remove_vocabulary_tag(known)
        return updates

    # ------------------------------------------------------------------ #
    # Logs and lifecycle                                                 #
    # ------------------------------------------------------------------ #

    def read_audit_log(self) -> str:
        return self._audit.read_text()

    def close(self) -> None:
        """Shut down cleanly: persist snapshots, close writers, drop journals.

        Raises:
            StateError: If a snapshot cannot be written. The journals are kept
                so the next startup can still recover this session.
        """
        if self._closed:
            return
        self._repository.save_vocabulary(VocabularySnapshot(tags=self._vocabulary.snapshot()))
        self._repository.save_history(HistorySnapshot.from_mapping(self._history.snapshot()))
        self._audit.close()
        self._rename_journal.discard()
        self._vocabulary_journal.discard()
        self._closed = True

    def __enter__(self) -> "TaggingManager":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _update(self, source: Path, candidate: Path) -> ImageUpdate:
        self._ensure_open()
        if candidate == source:
            return ImageUpdate.unchanged(source)
        if not source.exists():
            return self._fail(source, "missing_source", f"Image not found: {source}")

        operation = self._planner.plan(source, candidate)
        if operation is None:
            return ImageUpdate.unchanged(source)

        try:
            self._executor.apply(operation)
        except OSError as exc:
            return self._fail(
                source,
                "filesystem_error",
                f"Could not rename {source} to {operation.destination}: {exc}",
            )

        destination = operation.destination
        try:
            self._audit.record_update(source, destination)
            self._rename_journal.record(source, destination)
        except OSError as exc:
            LOGGER.error("Failed to journal rename %s -> %s: %s", source, destination, exc)
        self._history.on_rename(source, destination)
        self._index.replace(source, destination)
        return ImageUpdate(
            source=source,
            path=destination,
            status="renamed",
            conflict_applied=operation.conflict_applied,
        )

    def _fail(self, source: Path, reason: FailureReason, message: str) -> ImageUpdate:
        LOGGER.warning(message)
        try:
            self._audit.record_failure(message)
        except OSError as exc:
            LOGGER.error("Failed to write audit log: %s", exc)
        return ImageUpdate.failed(source, reason, message)

    def _register_tags(self, tags: Iterable[str]) -> list[str]:
        added = self._vocabulary.add_all(tags)
        for tag in added:
            self._journal_vocabulary("add", tag)
        return added

    def _journal_vocabulary(self, operation: str, tag: str) -> None:
        try:
            self._vocabulary_journal.record(operation, tag)
            if operation == "add":
                self._audit.record_tag_added(tag)
            else:
                self._audit.record_tag_removed(tag)
        except OSError as exc:
            LOGGER.error("Failed to journal vocabulary %s of %r: %s", operation, tag, exc)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Tagging session has been closed.")


__all__ = ["TaggingManager"]
