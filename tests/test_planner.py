"""Collision resolution and rename execution tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from snaptag.organization import RenameExecutor, RenameOperation, RenamePlanner, resolve_collision


def test_free_candidate_is_used_as_is(tmp_path: Path) -> None:
    source = tmp_path / "a.jpg"
    source.write_bytes(b"")

    destination, conflict = resolve_collision(source, tmp_path / "b.jpg")

    assert destination == tmp_path / "b.jpg"
    assert not conflict


def test_copy_suffixes_are_tried_in_order(tmp_path: Path) -> None:
    for name in ("a.jpg", "a copy.jpg", "b.jpg"):
        (tmp_path / name).write_bytes(b"")

    destination, conflict = resolve_collision(tmp_path / "b.jpg", tmp_path / "a.jpg")

    assert destination == tmp_path / "a copy 1.jpg"
    assert conflict


def test_suffix_goes_before_tags(tmp_path: Path) -> None:
    taken = {tmp_path / "a @x.jpg"}

    destination, _ = resolve_collision(
        tmp_path / "z.jpg", tmp_path / "a @x.jpg", exists=taken.__contains__
    )

    assert destination == tmp_path / "a copy @x.jpg"


def test_planner_returns_none_for_noop(tmp_path: Path) -> None:
    source = tmp_path / "a.jpg"

    assert RenamePlanner(exists=lambda _: True).plan(source, source) is None


def test_executor_moves_file_and_creates_parent(tmp_path: Path) -> None:
    source = tmp_path / "a.jpg"
    source.write_bytes(b"data")
    destination = tmp_path / "nested" / "dir" / "a.jpg"

    RenameExecutor().apply(RenameOperation(source=source, destination=destination))

    assert not source.exists()
    assert destination.read_bytes() == b"data"


def test_executor_refuses_to_overwrite(tmp_path: Path) -> None:
    source = tmp_path / "a.jpg"
    destination = tmp_path / "b.jpg"
    source.write_bytes(b"a")
    destination.write_bytes(b"b")

    with pytest.raises(FileExistsError):
        RenameExecutor().apply(RenameOperation(source=source, destination=destination))

    assert destination.read_bytes() == b"b"


def test_executor_reports_missing_source(tmp_path: Path) -> None:
    operation = RenameOperation(source=tmp_path / "gone.jpg", destination=tmp_path / "b.jpg")

    with pytest.raises(FileNotFoundError):
        RenameExecutor().apply(operation)
