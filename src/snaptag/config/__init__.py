"""Configuration management for snaptag."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    CLIOptions,
    LoggingSettings,
    ScanningOptions,
    SnaptagConfig,
    StorageSettings,
)
from .resolver import assign_dotted, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.snaptag/config.yaml")
ENV_PREFIX = "SNAPTAG__"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # snaptag configuration file
    # Edit by hand or with `snaptag config set KEY --value VALUE`.
    # Environment variables named SNAPTAG__SECTION__FIELD override these values.
    """
)


class ConfigManager:
    """Read and write the YAML configuration file and resolve effective settings."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
    ) -> SnaptagConfig:
        """Return the effective configuration.

        Precedence is defaults < config file < ``SNAPTAG__`` environment
        variables < ``cli_overrides``. A missing file simply contributes no
        overrides.

        Raises:
            ConfigError: If the file cannot be parsed or a value is invalid.
        """
        return resolve_with_precedence(
            defaults=SnaptagConfig(),
            file_overrides=self._read_file(),
            env_overrides=self._extract_env() if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file."""
        return self._read_file()

    def save(self, config: SnaptagConfig | Mapping[str, Any]) -> None:
        if isinstance(config, SnaptagConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(data, sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}",
            encoding="utf-8",
        )

    def ensure_exists(self) -> Path:
        """Write a defaults file when none exists yet and return its path."""
        if not self._config_path.exists():
            self.save(SnaptagConfig())
        return self._config_path

    def read_text(self) -> str:
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def set_value(self, key: str, raw_value: str) -> SnaptagConfig:
        """Persist ``raw_value`` (a YAML literal) at the dotted ``key``.

        The updated file is validated before it is written, so an invalid
        value leaves the file untouched.

        Returns:
            SnaptagConfig: The configuration resolved from the updated file.

        Raises:
            ConfigError: If the key is empty, the value cannot be parsed, or
                the resulting configuration is invalid.
        """
        segments = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not segments:
            raise ConfigError("KEY must be a dotted path such as 'logging.level'.")
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value: {exc}") from exc

        file_data = self._read_file()
        assign_dotted(file_data, segments, value)
        resolved = resolve_with_precedence(defaults=SnaptagConfig(), file_overrides=file_data)
        self.save(file_data)
        return resolved

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}
        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def _extract_env(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in self._env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
            if not path:
                continue
            try:
                value: Any = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                value = raw_value
            assign_dotted(overrides, path, value)
        return overrides


__all__ = [
    "CLIOptions",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "LoggingSettings",
    "ScanningOptions",
    "SnaptagConfig",
    "StorageSettings",
    "resolve_with_precedence",
]
