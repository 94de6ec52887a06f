"""Custom exceptions for configuration management."""


class ConfigError(Exception):
    """Raised when the snaptag configuration file or an override cannot be parsed or validated."""
