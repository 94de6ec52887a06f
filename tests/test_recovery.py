"""Startup recovery tests: snapshot loading, journal replay, and pruning."""

from __future__ import annotations

from pathlib import Path

from snaptag.state import HistorySnapshot, StateRepository, VocabularySnapshot
from snaptag.state.recovery import recover


def _always(_: Path) -> bool:
    return True


def test_recover_from_empty_state(tmp_path: Path) -> None:
    report = recover(StateRepository(tmp_path), exists=_always)

    assert len(report.history) == 0
    assert len(report.vocabulary) == 0
    assert not report.recovered_from_crash
    assert report.warnings == []


def test_recover_replays_journals_on_top_of_snapshot(tmp_path: Path) -> None:
    repo = StateRepository(tmp_path)
    repo.save_history(HistorySnapshot.from_mapping({Path("/p/a @x.jpg"): ["a.jpg"]}))
    repo.save_vocabulary(VocabularySnapshot(tags=["x"]))
    renames = repo.rename_journal()
    renames.record(Path("/p/a @x.jpg"), Path("/p/b @x.jpg"))
    renames.close()
    edits = repo.vocabulary_journal()
    edits.record("add", "beach")
    edits.record("remove", "x")
    edits.close()

    report = recover(repo, exists=_always)

    assert report.history.history_of(Path("/p/b @x.jpg")) == ["a.jpg", "a @x.jpg"]
    assert report.vocabulary.list() == ["beach"]
    assert report.replayed_renames == 1
    assert report.replayed_vocabulary == 2
    assert report.recovered_from_crash


def test_recover_is_repeatable_until_clean_shutdown(tmp_path: Path) -> None:
    """Two crashes in a row replay the same journal against the same snapshot."""
    repo = StateRepository(tmp_path)
    repo.save_history(HistorySnapshot.from_mapping({}))
    renames = repo.rename_journal()
    renames.record(Path("/p/a.jpg"), Path("/p/a @x.jpg"))
    renames.close()

    first = recover(repo, exists=_always)
    renames = repo.rename_journal()
    renames.record(Path("/p/a @x.jpg"), Path("/p/b @x.jpg"))
    renames.close()
    second = recover(repo, exists=_always)

    assert first.history.snapshot() == {Path("/p/a @x.jpg"): ["a.jpg"]}
    assert second.history.snapshot() == {Path("/p/b @x.jpg"): ["a.jpg", "a @x.jpg"]}
    assert second.replayed_renames == 2


def test_recover_treats_corrupt_snapshot_as_empty(tmp_path: Path) -> None:
    repo = StateRepository(tmp_path)
    (tmp_path / "history.json").write_text("{broken", encoding="utf-8")
    (tmp_path / "vocabulary.json").write_text('{"version": 99, "tags": []}', encoding="utf-8")

    report = recover(repo, exists=_always)

    assert len(report.history) == 0
    assert len(report.vocabulary) == 0
    assert len(report.warnings) == 2


def test_recover_prunes_missing_images(tmp_path: Path) -> None:
    present = tmp_path / "kept @x.jpg"
    present.write_bytes(b"")
    repo = StateRepository(tmp_path / "state")
    repo.save_history(
        HistorySnapshot.from_mapping(
            {present: ["kept.jpg"], tmp_path / "gone @x.jpg": ["gone.jpg"]}
        )
    )

    report = recover(repo)

    assert report.history.tracked_paths() == {present}
    assert report.pruned == [tmp_path / "gone @x.jpg"]
