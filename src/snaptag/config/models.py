"""Configuration models describing snaptag settings."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from snaptag.naming import IMAGE_EXTENSIONS


class SnaptagBaseModel(BaseModel):
    """Shared configuration for snaptag Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(SnaptagBaseModel):
    """Where durable state lives.

    Attributes:
        state_dir: Directory holding snapshots, journals, and logs.
    """

    state_dir: str = "~/.snaptag"


class ScanningOptions(SnaptagBaseModel):
    """Directory scan behavior.

    Attributes:
        extensions: File extensions treated as images (case-insensitive).
        include_hidden: Whether dot-files and dot-directories are scanned.
        follow_symlinks: Whether symbolic links are traversed.
    """

    extensions: List[str] = Field(default_factory=lambda: list(IMAGE_EXTENSIONS))
    include_hidden: bool = True
    follow_symlinks: bool = False

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        normalized = [item.strip().lower().lstrip(".") for item in value if item.strip()]
        if not normalized:
            raise ValueError("At least one image extension is required.")
        return list(dict.fromkeys(normalized))


class LoggingSettings(SnaptagBaseModel):
    """Diagnostic logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 3

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class CLIOptions(SnaptagBaseModel):
    """CLI presentation defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class SnaptagConfig(SnaptagBaseModel):
    """Top-level configuration struct for snaptag."""

    storage: StorageSettings = Field(default_factory=StorageSettings)
    scanning: ScanningOptions = Field(default_factory=ScanningOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "SnaptagBaseModel",
    "StorageSettings",
    "ScanningOptions",
    "LoggingSettings",
    "CLIOptions",
    "SnaptagConfig",
]
