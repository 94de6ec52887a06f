"""Tests for the snaptag command line interface."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from snaptag.cli import cli


def _env_with_home(tmp_path: Path, **extra: str) -> dict[str, Any]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.
        **extra: Additional variables to set.

    Returns:
        dict[str, Any]: Environment mapping with HOME set.
    """
    env = {key: value for key, value in os.environ.items() if not key.startswith("SNAPTAG__")}
    env["HOME"] = str(tmp_path)
    env.update(extra)
    return env


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


def test_cli_help_lists_commands(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("ls", "tag", "rename", "mv", "revert", "history", "vocab", "log", "config"):
        assert command in result.output


def test_tag_add_renames_file(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo.jpg")

    result = runner.invoke(
        cli, ["tag", "add", str(image), "beach", "sun", "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [Path(update["path"]).name for update in payload["updates"]] == [
        "photo @beach.jpg",
        "photo @beach @sun.jpg",
    ]
    assert (root / "photo @beach @sun.jpg").exists()
    assert (tmp_path / ".snaptag" / "snaptag.log").exists()
    assert not (tmp_path / ".snaptag" / "renames.journal").exists()


def test_tag_add_invalid_tag_reports_json_error(
    runner: CliRunner, tmp_path: Path, root: Path
) -> None:
    image = _touch(root / "photo.jpg")

    result = runner.invoke(
        cli, ["tag", "add", str(image), "not valid", "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "invalid_tag"
    assert image.exists()


def test_tag_rm_plain_output(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo @beach.jpg")

    result = runner.invoke(cli, ["tag", "rm", str(image), "beach"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "Renamed photo @beach.jpg -> photo.jpg" in result.output
    assert (root / "photo.jpg").exists()


def test_ls_with_filters(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    _touch(root / "a @sun.jpg")
    _touch(root / "nested" / "b @sun @sea.png")
    _touch(root / "c.jpeg")
    _touch(root / "notes.txt")
    env = _env_with_home(tmp_path)

    everything = runner.invoke(cli, ["ls", str(root), "--json"], env=env)
    filtered = runner.invoke(
        cli, ["ls", str(root), "--filter", "sun", "--filter", "SEA", "--json"], env=env
    )

    assert everything.exit_code == 0, everything.output
    assert [image["name"] for image in json.loads(everything.output)["images"]] == ["a", "b", "c"]
    payload = json.loads(filtered.output)
    assert payload["filters"] == ["SEA", "sun"]
    assert [image["tags"] for image in payload["images"]] == [["sea", "sun"]]


def test_ls_table_output(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    _touch(root / "a @sun.jpg")

    result = runner.invoke(cli, ["ls", str(root)], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "sun" in result.output


def test_rename_and_history(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo.jpg")
    env = _env_with_home(tmp_path)

    runner.invoke(cli, ["tag", "add", str(image), "beach"], env=env)
    renamed = runner.invoke(cli, ["rename", str(root / "photo @beach.jpg"), "vacation"], env=env)
    history = runner.invoke(cli, ["history", str(root / "vacation @beach.jpg"), "--json"], env=env)

    assert renamed.exit_code == 0, renamed.output
    assert json.loads(history.output)["history"] == ["photo.jpg", "photo @beach.jpg"]


def test_revert_restores_former_name(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo.jpg")
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["rename", str(image), "vacation"], env=env)

    result = runner.invoke(cli, ["revert", str(root / "vacation.jpg"), "photo.jpg"], env=env)

    assert result.exit_code == 0, result.output
    assert (root / "photo.jpg").exists()
    assert not (root / "vacation.jpg").exists()


def test_mv_moves_into_new_directory(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo @x.jpg")
    target = root / "album"

    result = runner.invoke(cli, ["mv", str(image), str(target)], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert (target / "photo @x.jpg").exists()
    assert "Moved" in result.output


def test_vocab_commands(runner: CliRunner, tmp_path: Path) -> None:
    env = _env_with_home(tmp_path)

    added = runner.invoke(cli, ["vocab", "add", "beach", "Sunset", "city"], env=env)
    listed = runner.invoke(
        cli, ["vocab", "list", "--exclude", "CITY", "--contains", "s", "--json"], env=env
    )
    removed = runner.invoke(cli, ["vocab", "rm", "beach"], env=env)
    missing = runner.invoke(cli, ["vocab", "rm", "beach"], env=env)
    invalid = runner.invoke(cli, ["vocab", "add", "bad tag"], env=env)

    assert added.exit_code == 0, added.output
    assert json.loads(listed.output) == {"tags": ["Sunset"]}
    assert removed.exit_code == 0
    assert missing.exit_code == 1
    assert "not in the vocabulary" in missing.output
    assert invalid.exit_code == 1


def test_vocab_rm_purge_strips_tag_from_images(
    runner: CliRunner, tmp_path: Path, root: Path
) -> None:
    _touch(root / "a @x.jpg")
    _touch(root / "b @x @y.jpg")
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["ls", str(root)], env=env)

    result = runner.invoke(cli, ["vocab", "rm", "x", "--purge"], env=env)

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in root.iterdir()) == ["a.jpg", "b @y.jpg"]
    listed = runner.invoke(cli, ["vocab", "list", "--json"], env=env)
    assert json.loads(listed.output) == {"tags": ["y"]}


def test_vocab_rm_purge_of_unknown_tag_fails(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["vocab", "rm", "ghost", "--purge"], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "not in the vocabulary" in result.output


def test_log_shows_audit_entries(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo.jpg")
    env = _env_with_home(tmp_path)

    empty = runner.invoke(cli, ["log"], env=env)
    runner.invoke(cli, ["tag", "add", str(image), "beach"], env=env)
    result = runner.invoke(cli, ["log"], env=env)

    assert "empty" in empty.output
    assert "RENAME" in result.output
    assert "TAG_ADDED beach" in result.output


def test_quiet_default_from_environment(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo.jpg")
    env = _env_with_home(tmp_path, SNAPTAG__CLI__QUIET_DEFAULT="true")

    result = runner.invoke(cli, ["tag", "add", str(image), "beach"], env=env)

    assert result.exit_code == 0, result.output
    assert result.output.strip() == ""
    assert (root / "photo @beach.jpg").exists()


def test_state_dir_can_be_relocated(runner: CliRunner, tmp_path: Path, root: Path) -> None:
    image = _touch(root / "photo.jpg")
    state_dir = tmp_path / "elsewhere"
    env = _env_with_home(tmp_path, SNAPTAG__STORAGE__STATE_DIR=str(state_dir))

    result = runner.invoke(cli, ["tag", "add", str(image), "beach"], env=env)

    assert result.exit_code == 0, result.output
    assert (state_dir / "history.json").exists()
    assert not (tmp_path / ".snaptag" / "history.json").exists()
