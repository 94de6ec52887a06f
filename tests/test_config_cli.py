"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from snaptag.cli import cli
from snaptag.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("SNAPTAG__")}
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".snaptag" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "view"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "scanning:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["config", "set", "logging.backup_count", "--value", "9"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert "backup_count" in result.output
    config = ConfigManager(config_path=_config_path(tmp_path), env={}).load()
    assert config.logging.backup_count == 9


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "logging.level", "--value", "LOUD"], env=env)

    assert result.exit_code != 0
    assert "Invalid configuration" in result.output
    assert not _config_path(tmp_path).exists()


def test_invalid_config_file_fails_commands(tmp_path: Path) -> None:
    runner = CliRunner()
    path = _config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("- not-a-mapping", encoding="utf-8")

    result = runner.invoke(cli, ["vocab", "list"], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "mapping" in result.output
